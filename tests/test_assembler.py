import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from connector_tf._config import SENSITIVE_PLACEHOLDER  # noqa: E402
from connector_tf.catalog import DataFormat, build_definition, builtin_registry  # noqa: E402
from connector_tf.errors import (  # noqa: E402
    AssemblyError,
    ConflictingAnswer,
    EmptyTopicSet,
    InvalidEnumValue,
    MissingRequiredField,
    TypeMismatch,
    UnknownField,
)
from connector_tf.prompting import next_required_field, pending_fields  # noqa: E402
from connector_tf.terraform.assembler import assemble, coerce_value  # noqa: E402

POSTGRES_ANSWERS = {
    "database.hostname": "db.internal",
    "database.user": "replicator",
    "database.password": "s3cr3t",
    "database.dbname": "orders",
    "topic.prefix": "cdc",
}


class AssemblerTests(unittest.TestCase):
    def setUp(self):
        self.registry = builtin_registry()
        self.postgres = self.registry.lookup("PostgresCdcSourceV2")
        self.s3_sink = self.registry.lookup("S3_SINK")

    def test_assemble_postgres_source(self):
        config = assemble(self.postgres, POSTGRES_ANSWERS, "orders-cdc", data_format="json_sr")

        self.assertEqual(config.connector_class, "PostgresCdcSourceV2")
        self.assertEqual(config.resource_name, "orders-cdc")
        self.assertEqual(config.values["connector.class"], "PostgresCdcSourceV2")
        self.assertEqual(config.values["name"], "orders-cdc")
        self.assertEqual(config.values["output.data.format"], "JSON_SR")
        self.assertEqual(config.data_format, DataFormat.JSON_SR)
        self.assertEqual(config.values["database.port"], 5432)
        self.assertEqual(config.values["database.sslmode"], "require")
        self.assertEqual(config.values["kafka.auth.mode"], "SERVICE_ACCOUNT")
        self.assertEqual(config.values["tasks.max"], 1)
        self.assertEqual(config.topics, ())
        self.assertNotIn("topics", config.values)

    def test_secrets_are_replaced_by_placeholder(self):
        config = assemble(self.postgres, POSTGRES_ANSWERS, "orders-cdc")

        self.assertEqual(config.values["database.password"], SENSITIVE_PLACEHOLDER)
        self.assertNotIn("s3cr3t", config.model_dump_json())

    def test_required_sensitive_field_without_answer_gets_placeholder(self):
        answers = {key: value for key, value in POSTGRES_ANSWERS.items() if key != "database.password"}

        config = assemble(self.postgres, answers, "orders-cdc")

        self.assertEqual(config.values["database.password"], SENSITIVE_PLACEHOLDER)

    def test_optional_sensitive_field_only_when_answered(self):
        config = assemble(self.postgres, POSTGRES_ANSWERS, "orders-cdc")
        self.assertNotIn("kafka.api.secret", config.values)

        answers = dict(POSTGRES_ANSWERS, **{"kafka.api.secret": "abc"})
        config = assemble(self.postgres, answers, "orders-cdc", placeholder="<SECRET>")
        self.assertEqual(config.values["kafka.api.secret"], "<SECRET>")

    def test_missing_required_field(self):
        answers = {key: value for key, value in POSTGRES_ANSWERS.items() if key != "database.hostname"}

        with self.assertRaises(MissingRequiredField) as ctx:
            assemble(self.postgres, answers, "orders-cdc")

        self.assertEqual(ctx.exception.field, "database.hostname")
        self.assertIsInstance(ctx.exception, AssemblyError)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_empty_answer_falls_back_to_default(self):
        answers = dict(POSTGRES_ANSWERS, **{"database.sslmode": ""})

        config = assemble(self.postgres, answers, "orders-cdc")

        self.assertEqual(config.values["database.sslmode"], "require")

    def test_empty_answer_for_required_field_without_default(self):
        answers = dict(POSTGRES_ANSWERS, **{"database.user": "   "})

        with self.assertRaises(MissingRequiredField):
            assemble(self.postgres, answers, "orders-cdc")

    def test_invalid_data_format(self):
        with self.assertRaises(InvalidEnumValue) as ctx:
            assemble(self.postgres, POSTGRES_ANSWERS, "orders-cdc", data_format="XML")

        self.assertEqual(ctx.exception.field, "output.data.format")
        self.assertEqual(ctx.exception.got, "XML")
        self.assertIn("AVRO", ctx.exception.allowed)

    def test_invalid_format_answer(self):
        answers = dict(POSTGRES_ANSWERS, **{"output.data.format": "XML"})

        with self.assertRaises(InvalidEnumValue):
            assemble(self.postgres, answers, "orders-cdc")

    def test_enum_match_is_case_sensitive(self):
        answers = dict(POSTGRES_ANSWERS, **{"database.sslmode": "REQUIRE"})

        with self.assertRaises(InvalidEnumValue) as ctx:
            assemble(self.postgres, answers, "orders-cdc")

        self.assertEqual(ctx.exception.field, "database.sslmode")

    def test_unknown_field_checked_first(self):
        answers = {"databse.hostname": "typo"}

        with self.assertRaises(UnknownField) as ctx:
            assemble(self.postgres, answers, "")

        self.assertEqual(ctx.exception.field, "databse.hostname")

    def test_blank_resource_name(self):
        with self.assertRaises(MissingRequiredField) as ctx:
            assemble(self.postgres, POSTGRES_ANSWERS, "  ")
        self.assertEqual(ctx.exception.field, "name")

    def test_integer_fields(self):
        config = assemble(self.postgres, dict(POSTGRES_ANSWERS, **{"database.port": "6543"}), "pg")
        self.assertEqual(config.values["database.port"], 6543)

        with self.assertRaises(TypeMismatch) as ctx:
            assemble(self.postgres, dict(POSTGRES_ANSWERS, **{"database.port": "five"}), "pg")
        self.assertEqual(ctx.exception.expected_kind, "integer")

        with self.assertRaises(TypeMismatch):
            assemble(self.postgres, dict(POSTGRES_ANSWERS, **{"database.port": True}), "pg")

    def test_string_list_from_comma_separated_answer(self):
        answers = dict(POSTGRES_ANSWERS, **{"table.include.list": "public.orders, ,public.items"})

        config = assemble(self.postgres, answers, "pg")

        self.assertEqual(config.values["table.include.list"], ("public.orders", "public.items"))

    def test_sink_requires_topics(self):
        answers = {"s3.bucket.name": "bucket"}

        with self.assertRaises(EmptyTopicSet):
            assemble(self.s3_sink, answers, "to-s3")

        with self.assertRaises(EmptyTopicSet):
            assemble(self.s3_sink, answers, "to-s3", topics=["orders", " "])

    def test_sink_topics_deduplicated_in_order(self):
        config = assemble(self.s3_sink, {"s3.bucket.name": "bucket"}, "to-s3", topics=["b", "a", "b"])

        self.assertEqual(config.topics, ("b", "a"))
        self.assertEqual(config.values["topics"], ("b", "a"))
        self.assertEqual(config.values["input.data.format"], "AVRO")
        self.assertEqual(config.values["output.data.format"], "PARQUET")

    def test_topics_from_answers(self):
        config = assemble(self.s3_sink, {"s3.bucket.name": "bucket", "topics": "x,y"}, "to-s3")
        self.assertEqual(config.topics, ("x", "y"))

    def test_yaml_booleans_accepted_for_boolean_enums(self):
        sink = self.registry.lookup("PostgresSink")
        answers = {
            "connection.host": "db",
            "connection.user": "writer",
            "db.name": "warehouse",
            "auto.create": True,
        }

        config = assemble(sink, answers, "pg-sink", topics=["orders"])

        self.assertEqual(config.values["auto.create"], "true")
        self.assertEqual(config.values["connection.port"], 5432)

    def test_answer_cannot_replace_connector_class(self):
        datagen = self.registry.lookup("DatagenSource")
        answers = {"connector.class": "Bogus", "kafka.topic": "pageviews", "quickstart": "PAGEVIEWS"}

        with self.assertRaises(ConflictingAnswer) as ctx:
            assemble(datagen, answers, "n")

        self.assertEqual(ctx.exception.field, "connector.class")
        self.assertEqual(ctx.exception.got, "Bogus")
        self.assertEqual(ctx.exception.expected, "DatagenSource")
        self.assertIsInstance(ctx.exception, AssemblyError)

    def test_answer_cannot_rename_connector(self):
        with self.assertRaises(ConflictingAnswer) as ctx:
            assemble(self.postgres, dict(POSTGRES_ANSWERS, name="other"), "orders-cdc")

        self.assertEqual(ctx.exception.field, "name")

    def test_matching_managed_answers_are_accepted(self):
        answers = dict(POSTGRES_ANSWERS, **{"connector.class": "PostgresCdcSourceV2", "name": " orders-cdc "})

        config = assemble(self.postgres, answers, "orders-cdc")

        self.assertEqual(config.values["connector.class"], "PostgresCdcSourceV2")
        self.assertEqual(config.values["name"], "orders-cdc")

    def test_every_value_key_is_declared(self):
        config = assemble(self.postgres, POSTGRES_ANSWERS, "orders-cdc")
        self.assertTrue(set(config.values) <= set(self.postgres.field_names))
        for spec in self.postgres.required_fields:
            self.assertIn(spec.name, config.values)


class CoerceValueTests(unittest.TestCase):
    def setUp(self):
        self.definition = build_definition(
            {
                "identifier": "Example",
                "direction": "source",
                "fields": [
                    {"name": "count", "kind": "int"},
                    {"name": "tables", "kind": "list", "required": True},
                    {"name": "host"},
                ],
            }
        )

    def test_string_accepts_integers(self):
        self.assertEqual(coerce_value(self.definition.field("host"), 42), "42")

    def test_string_rejects_lists(self):
        with self.assertRaises(TypeMismatch):
            coerce_value(self.definition.field("host"), ["a"])

    def test_required_list_must_not_be_empty(self):
        with self.assertRaises(MissingRequiredField):
            coerce_value(self.definition.field("tables"), " , ")

    def test_integer_keeps_ints(self):
        self.assertEqual(coerce_value(self.definition.field("count"), 7), 7)


class PromptPlannerTests(unittest.TestCase):
    def setUp(self):
        self.postgres = builtin_registry().lookup("PostgresCdcSourceV2")

    def test_next_required_field_follows_declared_order(self):
        self.assertEqual(next_required_field(self.postgres, {}).name, "database.hostname")

        answers = {"database.hostname": "db"}
        self.assertEqual(next_required_field(self.postgres, answers).name, "database.user")

    def test_fields_with_defaults_and_managed_fields_are_skipped(self):
        names = [spec.name for spec in pending_fields(self.postgres)]

        self.assertNotIn("database.port", names)
        self.assertNotIn("name", names)
        self.assertNotIn("connector.class", names)
        self.assertNotIn("output.data.format", names)
        self.assertEqual(
            names,
            ["database.hostname", "database.user", "database.password", "database.dbname", "topic.prefix"],
        )

    def test_blank_answers_do_not_count(self):
        answers = dict(POSTGRES_ANSWERS, **{"topic.prefix": "  "})
        self.assertEqual(next_required_field(self.postgres, answers).name, "topic.prefix")

    def test_complete_answers(self):
        self.assertIsNone(next_required_field(self.postgres, POSTGRES_ANSWERS))
