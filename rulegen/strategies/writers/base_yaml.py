"""Deterministic YAML serialization shared by the rule writers."""

import yaml


class RuleDumper(yaml.SafeDumper):
    """SafeDumper that prints multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


RuleDumper.add_representer(str, _represent_str)


def dump_document(document: dict, header: str = "") -> str:
    """Serialize a rule document, keys in insertion order."""
    body = yaml.dump(
        document,
        Dumper=RuleDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )
    return f"{header}\n{body}" if header else body
