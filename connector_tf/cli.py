import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

from connector_tf._config import Settings, load_settings
from connector_tf.catalog import ConnectorRegistry, DataFormat, builtin_registry, load_catalog
from connector_tf.errors import ConnectorToolError
from connector_tf.terraform import DocumentValidator, TerraformGenerator, assemble

_LOAD_ERRORS = (ConnectorToolError, OSError, ValueError, yaml.YAMLError)


def load_answers(answers: dict[str, Any] | str | Path) -> dict[str, Any]:
    """Load connector answers from dict, JSON file, or YAML file."""
    if isinstance(answers, dict):
        return answers

    answers_path = Path(answers)
    if not answers_path.exists():
        raise FileNotFoundError(f"Answers file not found: {answers_path}")

    suffix = answers_path.suffix.lower()
    content = answers_path.read_text(encoding="utf-8")

    if suffix == ".json":
        data = json.loads(content)
    elif suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(content)
    else:
        raise ValueError("Unsupported answers format. Use JSON (.json) or YAML (.yaml/.yml).")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Answers file must be a key-value object.")

    return data


def _resolve_registry(args, settings: Settings) -> ConnectorRegistry:
    catalog = args.catalog or settings.catalog_path
    if catalog:
        return load_catalog(catalog)
    return builtin_registry()


def cmd_generate(args):
    """Handle generate subcommand."""
    try:
        settings = load_settings()
        registry = _resolve_registry(args, settings)
        answers = load_answers(args.answers) if args.answers else {}
    except _LOAD_ERRORS as e:
        print(f"Error loading inputs: {e}", file=sys.stderr)
        sys.exit(1)

    definition = registry.lookup(args.connector)
    if definition is None:
        print(f"Error: unknown connector type '{args.connector}'. Run list-plugins to see the catalog.", file=sys.stderr)
        sys.exit(1)

    try:
        config = assemble(
            definition,
            answers,
            args.name,
            topics=args.topic,
            data_format=args.data_format,
            placeholder=settings.placeholder,
        )
        document = TerraformGenerator(registry, settings).generate(config)
    except ConnectorToolError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.output:
        sys.stdout.write(document.text)
        sys.exit(0)

    try:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(document.text, encoding="utf-8")
    except OSError as e:
        print(f"Error writing {args.output}: {e}", file=sys.stderr)
        sys.exit(1)

    result = {
        "resource_name": document.resource_name,
        "connector_class": document.connector_class,
        "output": str(output_path),
    }
    print(json.dumps(result))
    print(f"Terraform configuration written to {output_path}.", file=sys.stderr)
    sys.exit(0)


def cmd_validate(args):
    """Handle validate subcommand."""
    try:
        settings = load_settings()
        registry = _resolve_registry(args, settings)
        config_path = Path(args.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Terraform file not found: {config_path}")
        text = config_path.read_text(encoding="utf-8")
    except _LOAD_ERRORS as e:
        print(f"Error loading inputs: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        report = DocumentValidator(registry, settings).validate(text)
    except ConnectorToolError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for finding in report.findings:
        print(str(finding), file=sys.stderr)
    print(json.dumps(report.summary()))

    if report.ok:
        print(f"{config_path} is valid.", file=sys.stderr)
        sys.exit(0)
    else:
        print(f"{config_path} has {len(report.errors)} error(s).", file=sys.stderr)
        sys.exit(1)


def cmd_list_plugins(args):
    """Handle list-plugins subcommand."""
    try:
        registry = _resolve_registry(args, load_settings())
    except _LOAD_ERRORS as e:
        print(f"Error loading catalog: {e}", file=sys.stderr)
        sys.exit(1)

    plugins = [
        {
            "identifier": definition.identifier,
            "direction": definition.direction.value,
            "display_name": definition.label,
        }
        for definition in registry.list_definitions(args.type)
    ]
    print(json.dumps(plugins))
    sys.exit(0)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate and validate Confluent connector Terraform")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    # Generate command
    generate_parser = subparsers.add_parser("generate", help="Generate a confluent_connector resource")
    generate_parser.add_argument("--name", required=True, help="Connector name, also used for the resource label")
    generate_parser.add_argument("--connector", required=True, help="Connector class, e.g. PostgresCdcSourceV2")
    generate_parser.add_argument("--output", help="File to write; prints to stdout when omitted")
    generate_parser.add_argument("--answers", help="Path to JSON/YAML file with connector field values")
    generate_parser.add_argument("--topic", action="append", default=[], help="Topic name (repeatable)")
    generate_parser.add_argument(
        "--data-format",
        default=DataFormat.AVRO.value,
        choices=[data_format.value for data_format in DataFormat],
        type=str.upper,
        help="Record format (default: AVRO)",
    )
    generate_parser.add_argument("--catalog", help="Path to a JSON/YAML connector catalog")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a Terraform connector file")
    validate_parser.add_argument("--config-file", required=True, help="Terraform file to validate")
    validate_parser.add_argument("--catalog", help="Path to a JSON/YAML connector catalog")

    # List-plugins command
    list_parser = subparsers.add_parser("list-plugins", help="List connectors in the catalog")
    list_parser.add_argument("--type", choices=["source", "sink"], help="Only list sources or sinks")
    list_parser.add_argument("--catalog", help="Path to a JSON/YAML connector catalog")

    args = parser.parse_args(argv)

    if args.command == "generate":
        cmd_generate(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "list-plugins":
        cmd_list_plugins(args)
    else:
        parser.print_help()
        sys.exit(2)


if __name__ == "__main__":
    main()
