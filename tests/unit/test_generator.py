"""Unit tests for the rule generation engine."""

import asyncio

import pytest

from rulegen.interfaces.generator import DuplicateRuleError, RuleValidationError, UnresolvedPlaceholderError
from rulegen.interfaces.profile_store import Profile
from rulegen.interfaces.template_set import TemplateFragment
from rulegen.strategies.generator import PairStatus, RuleGenerator, rule_title, rule_uid
from rulegen.strategies.generator.engine import find_overlaps
from rulegen.strategies.templates import parse_fragment
from tests.helpers import APP_DEGRADED, APP_NOT_SYNCED, PROD_VALUES, STAGING_VALUES


def make_fragment(identifier: str, text: str, category: str = "backend/argo-applications"):
    return TemplateFragment(
        identifier=identifier,
        category=category,
        segments=parse_fragment(text),
    )


PROD = Profile(identifier="prod", values=PROD_VALUES)
STAGING = Profile(identifier="staging", values=STAGING_VALUES)


def generate(generator, profiles, fragments):
    return asyncio.run(generator.generate(profiles, fragments))


class TestRuleGenerator:
    """Test suite for RuleGenerator."""

    @pytest.fixture
    def generator(self):
        """Create a generator instance."""
        return RuleGenerator(max_concurrency=4)

    @pytest.fixture
    def fragments(self):
        return [
            make_fragment("app-not-synced", APP_NOT_SYNCED),
            make_fragment("app-degraded", APP_DEGRADED),
        ]

    # =========================================================================
    # Substitution Tests
    # =========================================================================

    def test_prod_example(self, generator):
        """Test that profile values resolve and $labels placeholders survive."""
        rules, report = generate(generator, [PROD], [make_fragment("app-not-synced", APP_NOT_SYNCED)])

        rule = rules[0]
        assert 'project="production"' in rule.query
        assert 'dest_namespace="prod"' in rule.query
        assert rule.annotations["summary"] == "{{ $labels.name }} is out of sync in prod"
        assert rule.annotations["committer"] == "{{ $labels.label_committer }}"
        assert rule.labels == {"env": "prod"}
        assert rule.for_duration == "10m"
        assert rule.folder == "prod"
        assert report.ok

    def test_defaults_from_schema(self, generator):
        """Test that optional rule fields take their defaults."""
        rules, _ = generate(generator, [PROD], [make_fragment("app-degraded", APP_DEGRADED)])

        rule = rules[0]
        assert rule.for_duration == "5m"
        assert rule.threshold == 0
        assert rule.no_data_state == "OK"
        assert rule.exec_err_state == "Error"

    def test_raw_block_kept_in_annotation(self, generator):
        """Test that raw block text reaches the rule untouched."""
        fragment = make_fragment(
            "raw",
            'query: up == 0\nannotations:\n  summary: "{% raw %}{{ env }}{% endraw %} {{env}}"\n',
        )

        rules, _ = generate(generator, [PROD], [fragment])

        assert rules[0].annotations["summary"] == "{{ env }} prod"

    def test_uid_and_title(self, generator):
        """Test that UID and title derive from the fragment key and profile."""
        rules, _ = generate(generator, [PROD], [make_fragment("app-not-synced", APP_NOT_SYNCED)])

        assert rules[0].uid == rule_uid("backend/argo-applications/app-not-synced", "prod")
        assert rules[0].uid.startswith("prod-app-not-synced-")
        assert rules[0].title == "App not synced (backend/argo-applications) [prod]"

    def test_flow_mapping_labels(self, generator):
        """Test that a placeholder inside a YAML flow mapping renders."""
        fragment = make_fragment("flow", "query: up\nlabels: {env: {{env}}}\n")

        rules, report = generate(generator, [PROD], [fragment])

        assert report.ok
        assert rules[0].labels == {"env": "prod"}

    # =========================================================================
    # Report Tests
    # =========================================================================

    def test_idempotent(self, generator, fragments):
        """Test that identical inputs produce identical output."""
        first, first_report = generate(generator, [PROD, STAGING], fragments)
        second, second_report = generate(RuleGenerator(), [PROD, STAGING], fragments)

        assert [r.model_dump_json() for r in first] == [r.model_dump_json() for r in second]
        assert first_report == second_report

    def test_disabled_profile_skipped(self, generator, fragments):
        """Test that disabled profiles produce no rules and are not errors."""
        disabled = Profile(identifier="sandbox", enabled=False, values={})

        rules, report = generate(generator, [PROD, disabled], fragments)

        assert {r.profile for r in rules} == {"prod"}
        assert [o.profile for o in report.skipped] == ["sandbox"]
        assert report.skipped[0].fragment is None
        assert report.failed == []
        assert report.ok

    def test_unresolved_placeholder_fails_one_pair(self, generator, fragments):
        """Test that a missing variable fails only that pair."""
        partial = Profile(identifier="qa", values={"project": "qa", "env": "qa"})

        rules, report = generate(generator, [PROD, partial], fragments)

        assert len(rules) == 3
        failed = report.failed
        assert len(failed) == 1
        assert failed[0].profile == "qa"
        assert failed[0].fragment == "backend/argo-applications/app-not-synced"
        assert failed[0].error_kind == "UnresolvedPlaceholderError"
        assert "dest_namespace" in failed[0].error
        assert not report.ok

    def test_invalid_rule_fails_one_pair(self, generator):
        """Test that a rendered rule violating the schema fails that pair."""
        fragments = [
            make_fragment("no-query", "annotations:\n  summary: hi\n"),
            make_fragment("bad-for", "query: up\nfor: soon\n"),
            make_fragment("typo", "query: up\nannotation: {}\n"),
            make_fragment("list", "- query: up\n"),
            make_fragment("own-folder", "query: up\nlabels:\n  folder: elsewhere\n"),
            make_fragment("ok", "query: up == 0\n"),
        ]

        rules, report = generate(generator, [PROD], fragments)

        assert [r.fragment for r in rules] == ["ok"]
        assert {o.error_kind for o in report.failed} == {"RuleValidationError"}
        assert len(report.failed) == 5
        assert "reserved label names: folder" in report.failed[4].error

    def test_value_breaking_yaml_fails_pair(self, generator):
        """Test that a value producing invalid YAML is a validation failure."""
        fragment = make_fragment("broken", "query: {{ expr }}\n")
        profile = Profile(identifier="prod", values={"expr": "[unclosed"})

        rules, report = generate(generator, [profile], [fragment])

        assert rules == []
        assert "not valid YAML" in report.failed[0].error

    def test_outcomes_grouped_by_profile(self, generator, fragments):
        """Test that report outcomes follow profile then fragment order."""
        disabled = Profile(identifier="sandbox", enabled=False)

        _, report = generate(generator, [PROD, disabled, STAGING], fragments)

        assert [(o.profile, o.status) for o in report.outcomes] == [
            ("prod", PairStatus.GENERATED),
            ("prod", PairStatus.GENERATED),
            ("sandbox", PairStatus.SKIPPED),
            ("staging", PairStatus.GENERATED),
            ("staging", PairStatus.GENERATED),
        ]

    # =========================================================================
    # Ordering Tests
    # =========================================================================

    def test_order_independent_of_completion(self):
        """Test that output order is fixed even when early pairs finish last."""
        finished: list[str] = []

        class SlowStartGenerator(RuleGenerator):
            async def _render_pair(self, profile, fragment):
                delays = {"prod": 0.04, "staging": 0.0}
                await asyncio.sleep(delays[profile.identifier] + (0.02 if fragment.identifier == "a" else 0))
                result = await super()._render_pair(profile, fragment)
                finished.append(f"{profile.identifier}/{fragment.identifier}")
                return result

        fragments = [make_fragment("a", "query: up\n"), make_fragment("b", "query: up\n")]

        rules, _ = generate(SlowStartGenerator(max_concurrency=4), [PROD, STAGING], fragments)

        assert finished[0] == "staging/b"
        assert [f"{r.profile}/{r.fragment}" for r in rules] == [
            "prod/a",
            "prod/b",
            "staging/a",
            "staging/b",
        ]

    # =========================================================================
    # Duplicate Tests
    # =========================================================================

    def test_colliding_uids_across_profiles_abort(self, generator):
        """Test that a UID collision between two profiles aborts the run."""
        profiles = [
            Profile(identifier="prod.eu", values={}),
            Profile(identifier="prod-eu", values={}),
        ]
        fragments = [make_fragment("x", "query: up\n", category="backend")]

        with pytest.raises(DuplicateRuleError) as exc_info:
            generate(generator, profiles, fragments)

        conflicts = exc_info.value.conflicts
        assert len(conflicts) == 1
        assert conflicts[0].kind == "uid"
        assert conflicts[0].key == "prod-eu-backend-x"
        assert conflicts[0].sources == ("prod.eu/backend/x", "prod-eu/backend/x")

        report = exc_info.value.report
        assert [(c.kind, c.key) for c in report.conflicts] == [("uid", "prod-eu-backend-x")]
        assert report.conflicts[0].sources == ["prod.eu/backend/x", "prod-eu/backend/x"]
        assert report.summary()["conflicts"] == 1
        assert not report.ok

    def test_colliding_titles_in_folder_abort(self, generator):
        """Test that two rules with the same title in one folder abort."""
        fragments = [make_fragment("app_down", "query: up\n"), make_fragment("app-down", "query: up\n")]

        with pytest.raises(DuplicateRuleError) as exc_info:
            generate(generator, [PROD], fragments)

        conflicts = exc_info.value.conflicts
        assert [c.kind for c in conflicts] == ["title"]
        assert conflicts[0].key == "App down (backend/argo-applications) [prod] @ prod"
        assert exc_info.value.report.conflicts[0].kind == "title"

    def test_same_fragment_name_in_two_categories(self, generator):
        """Test that equal identifiers in different categories both generate."""
        fragments = [
            make_fragment("down", "query: up\n", category="backend"),
            make_fragment("down", "query: up\n", category="frontend"),
        ]

        rules, report = generate(generator, [PROD], fragments)

        assert report.ok
        assert [r.uid for r in rules] == ["prod-backend-down", "prod-frontend-down"]
        assert [r.title for r in rules] == ["Down (backend) [prod]", "Down (frontend) [prod]"]

    def test_long_keys_in_two_categories(self, generator):
        """Test that shortened UIDs stay distinct across categories."""
        fragments = [
            make_fragment("application-not-synced", "query: up\n", category="backend/argo-applications"),
            make_fragment("application-not-synced", "query: up\n", category="frontend/argo-applications"),
        ]

        rules, report = generate(generator, [STAGING], fragments)

        assert report.ok
        assert rules[0].uid != rules[1].uid
        assert all(len(r.uid) <= 40 for r in rules)

    # =========================================================================
    # Overlap Tests
    # =========================================================================

    def test_overlapping_selectors_reported(self, generator, fragments):
        """Test that profiles sharing a namespace alternative are reported."""
        prod = Profile(identifier="prod", values={**PROD_VALUES, "dest_namespace": "prod|exodia"})
        exodia = Profile(identifier="exodia", values={**PROD_VALUES, "dest_namespace": "exodia"})

        rules, report = generate(generator, [prod, exodia], fragments)

        assert len(rules) == 4
        assert len(report.overlaps) == 1
        overlap = report.overlaps[0]
        assert overlap.key == "dest_namespace"
        assert overlap.value == "exodia"
        assert overlap.profiles == ["prod", "exodia"]
        assert report.ok


class TestHelpers:
    """Tests for the UID, title and overlap helpers."""

    def test_uid_sanitized(self):
        """Test that characters Grafana rejects are replaced."""
        assert rule_uid("eu/app.not synced", "prod") == "prod-eu-app-not-synced"

    def test_uid_shortened_with_digest(self):
        """Test that long UIDs keep the fragment name and respect the 40 character limit."""
        uid = rule_uid("backend/" + "x" * 60, "prod")

        assert len(uid) == 40
        assert uid.startswith("prod-xxx")
        assert uid == rule_uid("backend/" + "x" * 60, "prod")
        assert uid != rule_uid("frontend/" + "x" * 60, "prod")

    def test_title(self):
        """Test that titles humanize the fragment identifier and name the category."""
        assert rule_title("backend/app_not-synced", "staging") == "App not synced (backend) [staging]"
        assert rule_title("app-down", "prod") == "App down [prod]"

    def test_overlaps_ignore_disabled_profiles(self):
        """Test that disabled profiles never overlap."""
        profiles = [
            Profile(identifier="prod", values={"dest_namespace": "prod"}),
            Profile(identifier="old", enabled=False, values={"dest_namespace": "prod"}),
        ]

        assert find_overlaps(profiles, ["dest_namespace"]) == []

    def test_error_messages(self):
        """Test that per-pair errors name the profile and fragment."""
        unresolved = UnresolvedPlaceholderError("qa", "backend/a", ["b", "a"])
        invalid = RuleValidationError("qa", "backend/a", "query: Field required")

        assert unresolved.missing == ("a", "b")
        assert "qa" in str(unresolved) and "backend/a" in str(unresolved)
        assert "Field required" in str(invalid)
