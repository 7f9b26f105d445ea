import re
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from form_intake.core.registry import ConfigError, load_configuration, parse_configuration
from form_intake.schemas.form_config import Configuration, FieldDescriptor, TableDescriptor


def _signup_table(**overrides) -> TableDescriptor:
    data = {
        "template": "form.html",
        "title": "Signup",
        "instructions": "Fill in",
        "fields": [
            {"name": "email", "datatype": "email", "label": "Email", "placeholder": "", "required": True, "unique": True},
            {"name": "age", "datatype": "number", "label": "Age", "placeholder": "", "required": False, "unique": False},
        ],
    }
    data.update(overrides)
    return TableDescriptor.model_validate(data)


class FieldDescriptorTests(unittest.TestCase):
    def test_column_definition_modifiers(self):
        self.assertEqual(
            FieldDescriptor(name="email", datatype="email", required=True, unique=True).column_definition(),
            "email TEXT NOT NULL UNIQUE",
        )
        self.assertEqual(FieldDescriptor(name="joined", datatype="date", required=True).column_definition(), "joined DATE NOT NULL")
        self.assertEqual(FieldDescriptor(name="code", datatype="week", unique=True).column_definition(), "code INTEGER UNIQUE")
        self.assertEqual(FieldDescriptor(name="notes", datatype="textarea").column_definition(), "notes TEXT")

    def test_invalid_field_names_are_rejected(self):
        for name in ["", "1st", "first name", "email;DROP TABLE x", "a-b", "x" * 64]:
            with self.subTest(name=name):
                with self.assertRaises(ValidationError):
                    FieldDescriptor(name=name)

    def test_descriptor_is_immutable(self):
        field = FieldDescriptor(name="email")
        with self.assertRaises(ValidationError):
            field.name = "other"


class TableDescriptorSqlTests(unittest.TestCase):
    def test_create_statement_keeps_field_order_and_modifiers(self):
        sql = _signup_table().build_create_statement("signup")
        self.assertTrue(sql.startswith("CREATE TABLE IF NOT EXISTS signup ("))
        self.assertIn("email TEXT NOT NULL UNIQUE", sql)
        self.assertRegex(sql, r"\bage REAL\n")
        self.assertNotIn("age REAL NOT NULL", sql)
        self.assertNotIn("age REAL UNIQUE", sql)
        self.assertLess(sql.index("email"), sql.index("age"))
        self.assertTrue(sql.rstrip().endswith(")"))
        self.assertNotIn(",\n)", sql)

    def test_insert_statement_has_one_placeholder_per_field_in_order(self):
        table = _signup_table(
            fields=[
                {"name": "c", "datatype": "checkbox"},
                {"name": "a", "datatype": "date"},
                {"name": "b", "datatype": "whatever"},
            ]
        )
        sql = table.build_insert_statement("poll")
        self.assertEqual(sql, "INSERT INTO poll (c, a, b) VALUES (:p1, :p2, :p3)")
        self.assertEqual(re.findall(r":p\d+", sql), [":p1", ":p2", ":p3"])

    def test_drop_and_select_statements(self):
        table = _signup_table()
        self.assertEqual(table.build_drop_statement("signup"), "DROP TABLE IF EXISTS signup")
        self.assertEqual(table.build_select_statement("signup", 10), "SELECT * FROM signup LIMIT 10 OFFSET 0")

    def test_bind_values_follow_field_order_and_default_to_empty(self):
        table = _signup_table()
        self.assertEqual(table.bind_values({"age": "31", "extra": "ignored"}), {"p1": "", "p2": "31"})
        self.assertEqual(table.bind_values({"email": "a@b.c", "age": object()}), {"p1": "a@b.c", "p2": ""})

    def test_decode_row_substitutes_empty_string(self):
        table = _signup_table()
        self.assertEqual(table.decode_row({"age": 31.0, "email": "a@b.c"}), ["a@b.c", "31.0"])
        self.assertEqual(table.decode_row({"email": None}), ["", ""])
        self.assertEqual(table.decode_row({"email": b"\xff", "age": b"7"}), ["", "7"])

    def test_duplicate_field_names_are_rejected(self):
        with self.assertRaises(ValidationError):
            _signup_table(fields=[{"name": "email"}, {"name": "Email"}])

    def test_table_without_fields_is_rejected(self):
        with self.assertRaises(ValidationError):
            _signup_table(fields=[])


VALID_YAML = """
log_level: INFO
db_url: sqlite://forms.db
port: "9000"
username: admin
password: secret
tables:
  signup:
    template: form.html
    title: Signup
    instructions: Fill in
    fields:
      - name: email
        datatype: email
        label: Email
        placeholder: you@example.com
        required: true
        unique: true
"""


class ConfigurationLoadingTests(unittest.TestCase):
    def test_parse_valid_document(self):
        configuration = parse_configuration(VALID_YAML)
        self.assertEqual(configuration.log_level, "info")
        self.assertEqual(configuration.port, 9000)
        self.assertEqual(configuration.username, "admin")
        table = configuration.get_table("signup")
        self.assertIsNotNone(table)
        self.assertEqual(table.field_names, ["email"])
        self.assertTrue(table.fields[0].required)
        self.assertIsNone(configuration.get_table("unknown"))

    def test_sqlalchemy_url_normalization(self):
        configuration = parse_configuration(VALID_YAML)
        self.assertEqual(configuration.sqlalchemy_url, "sqlite+pysqlite:///forms.db")
        cases = {
            "data/forms.db": "sqlite+pysqlite:///data/forms.db",
            "sqlite://forms.db": "sqlite+pysqlite:///forms.db",
            "sqlite:///srv/forms/abs.db": "sqlite+pysqlite:////srv/forms/abs.db",
            "sqlite::memory:": "sqlite+pysqlite:///:memory:",
            "sqlite://:memory:": "sqlite+pysqlite:///:memory:",
            "sqlite:forms.db?mode=rwc": "sqlite+pysqlite:///forms.db",
            "sqlite+pysqlite:////srv/forms.db": "sqlite+pysqlite:////srv/forms.db",
            "postgresql+psycopg://u:p@db/forms": "postgresql+psycopg://u:p@db/forms",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(configuration.model_copy(update={"db_url": raw}).sqlalchemy_url, expected)

    def test_invalid_yaml_raises_config_error(self):
        with self.assertRaises(ConfigError):
            parse_configuration("tables: [unclosed")

    def test_non_mapping_document_raises_config_error(self):
        with self.assertRaises(ConfigError):
            parse_configuration("- just\n- a list\n")

    def test_missing_required_keys_raise_config_error(self):
        with self.assertRaises(ConfigError) as ctx:
            parse_configuration("log_level: info\ntables: {}\n")
        self.assertIn("db_url", str(ctx.exception))

    def test_unsafe_table_name_raises_config_error(self):
        broken = VALID_YAML.replace("  signup:", '  "signup; DROP TABLE x":')
        with self.assertRaises(ConfigError):
            parse_configuration(broken)

    def test_route_names_cannot_be_tables(self):
        with self.assertRaises(ConfigError):
            parse_configuration(VALID_YAML.replace("  signup:", "  static:"))

    def test_table_names_differing_only_in_case_are_rejected(self):
        extra = """
  Signup:
    template: form.html
    title: Signup again
    fields:
      - name: email
"""
        with self.assertRaises(ConfigError) as ctx:
            parse_configuration(VALID_YAML + extra)
        self.assertIn("differ only in case", str(ctx.exception))

    def test_unknown_log_level_raises_config_error(self):
        with self.assertRaises(ConfigError):
            parse_configuration(VALID_YAML.replace("log_level: INFO", "log_level: loud"))

    def test_load_configuration_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yml"
            path.write_text(VALID_YAML, encoding="utf-8")
            configuration = load_configuration(path)
        self.assertIsInstance(configuration, Configuration)
        self.assertIn("signup", configuration.tables)

    def test_missing_file_raises_config_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_configuration(Path(tmp) / "absent.yml")


if __name__ == "__main__":
    unittest.main()
