import base64
import binascii

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param

from form_intake.core.config import settings
from form_intake.core.security import credentials_match
from form_intake.schemas.form_config import Configuration


class SoftHTTPBasic(HTTPBasic):
    """HTTP Basic that decodes UTF-8 credentials and never raises.

    Anything that is not a well formed Basic header yields None.
    """

    async def __call__(self, request: Request) -> HTTPBasicCredentials | None:
        scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
        if scheme.lower() != "basic" or not param:
            return None
        try:
            decoded = base64.b64decode(param, validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            return None
        username, separator, password = decoded.partition(":")
        if not separator:
            return None
        return HTTPBasicCredentials(username=username, password=password)


basic = SoftHTTPBasic(auto_error=False)


def get_configuration(request: Request) -> Configuration:
    return request.app.state.configuration


def get_results_access(
    creds: HTTPBasicCredentials | None = Depends(basic),
    configuration: Configuration = Depends(get_configuration),
) -> bool:
    authorized = creds is not None and credentials_match(
        creds.username,
        creds.password,
        configuration.username,
        configuration.password,
    )
    if not authorized and settings.RESULTS_AUTH_CHALLENGE:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )
    return authorized


async def get_submitted_form(request: Request) -> dict[str, str]:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
