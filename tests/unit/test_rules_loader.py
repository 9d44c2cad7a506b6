"""
Rules file loading and schema validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from src.rules.loader import load_rules, parse_rules
from src.rules.models import Rules


@pytest.fixture
def rules_data(rules: Rules) -> dict[str, Any]:
    """The project rules as plain data, ready to be broken."""
    return rules.model_dump()


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data)


class TestLoadRules:
    def test_project_rules_file_is_valid(self, rules: Rules) -> None:
        assert rules.project.slug == "finsite"
        assert rules.calculators.tax_year == 2024
        assert len(rules.drip.delay_days) == 8
        assert rules.rate_limits.login.max_requests == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_fenced_yaml_block(self, rules_data: dict[str, Any]) -> None:
        text = "# Rules\n\nSome notes.\n\n```yaml\n" + _dump(rules_data) + "```\n"
        assert parse_rules(text).site.name == rules_data["site"]["name"]

    def test_base_url_trailing_slash_stripped(self, rules_data: dict[str, Any]) -> None:
        rules_data["site"]["base_url"] = "https://example.com/"
        assert parse_rules(_dump(rules_data)).site.base_url == "https://example.com"


class TestRulesValidation:
    def test_bad_yaml(self) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            parse_rules("site: [unclosed")

    def test_missing_section(self, rules_data: dict[str, Any]) -> None:
        del rules_data["drip"]
        with pytest.raises(ValueError, match="validation failed"):
            parse_rules(_dump(rules_data))

    def test_unknown_tax_year(self, rules_data: dict[str, Any]) -> None:
        rules_data["calculators"]["tax_year"] = 1999
        with pytest.raises(ValueError, match="tax_year"):
            parse_rules(_dump(rules_data))

    def test_unknown_allocation_rule(self, rules_data: dict[str, Any]) -> None:
        rules_data["calculators"]["allocation_rule"] = "90/5/5"
        with pytest.raises(ValueError, match="allocation_rule"):
            parse_rules(_dump(rules_data))

    @pytest.mark.parametrize("delays", [[], [0, -1], [0, 7, 3]])
    def test_bad_delay_days(self, rules_data: dict[str, Any], delays: list[int]) -> None:
        rules_data["drip"]["delay_days"] = delays
        with pytest.raises(ValueError):
            parse_rules(_dump(rules_data))

    def test_delay_count_must_match_sequence(self, rules_data: dict[str, Any]) -> None:
        rules_data["drip"]["delay_days"] = [0, 3, 7, 14, 21, 28, 42]
        with pytest.raises(ValueError, match="one delay per sequence step"):
            parse_rules(_dump(rules_data))

    def test_zero_rate_limit_rejected(self, rules_data: dict[str, Any]) -> None:
        rules_data["rate_limits"]["post"]["max_requests"] = 0
        with pytest.raises(ValueError):
            parse_rules(_dump(rules_data))
