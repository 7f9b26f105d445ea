import secrets


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    # Evaluate both comparisons so timing does not reveal which part was wrong.
    username_ok = secrets.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return username_ok and password_ok
