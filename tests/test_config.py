# tests/test_config.py
"""
Tests for CheckConfig validation and option building.
"""

from javatime_shims.config import CheckConfig


class TestCheckConfig:

    def test_defaults_are_valid(self):
        config = CheckConfig()
        assert config.validate() == []
        assert config.to_options() == {
            "trusted_namespaces": (),
            "report_redundant": True,
            "report_invalid": True,
        }

    def test_bad_output_format(self):
        warnings = CheckConfig(output_format="xml").validate()
        assert any("output_format" in w for w in warnings)

    def test_nothing_to_report(self):
        warnings = CheckConfig(report_redundant=False, report_invalid=False).validate()
        assert any("nothing will be reported" in w for w in warnings)

    def test_trusted_namespace_warnings(self):
        warnings = CheckConfig(extra_trusted_namespaces=["", "java.time", " com.x"]).validate()
        assert len(warnings) == 3

    def test_fix_without_redundant(self):
        warnings = CheckConfig(apply_fixes=True, report_redundant=False).validate()
        assert any("apply_fixes" in w for w in warnings)

    def test_empty_checker_list(self):
        assert CheckConfig(checkers=[]).validate()

    def test_options_carry_extra_namespaces(self):
        options = CheckConfig(
            extra_trusted_namespaces=["com.example.legacy"], report_invalid=False,
        ).to_options()
        assert options["trusted_namespaces"] == ("com.example.legacy",)
        assert options["report_invalid"] is False
