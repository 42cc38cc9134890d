"""Tests for steward.policy.index module."""

import pytest

from steward.lib.types import Level
from steward.lib.validate import ValidationError
from steward.policy.index import (
    DanglingPolicyReference,
    build_policy_index,
    load_policy_index,
    normalize_key,
)


class TestBuildPolicyIndex:
    """Tests for building the index from a parsed document."""

    def test_records_built_from_policy_details(self, index):
        assert len(index) == 8
        record = index.get("4.1")
        assert record.title == "Server-side input validation"
        assert record.level is Level.MUST
        assert record.category == "security"

    def test_lowercase_level_accepted(self, index):
        assert index.get("9.3").level is Level.SHOULD

    def test_description_form_unwrapped(self, index):
        """A lookup entry with a description is reduced to its policies."""
        assert index.lookup("keywords", "validation") == ("4.1", "5.9", "17.1")

    def test_lookup_order_preserved(self, index):
        assert index.lookup("keywords", "errors") == ("9.3", "3.6")

    def test_keys_normalized(self, index):
        assert "logging" in index.keywords
        assert index.lookup("keywords", "  LOGGING") == ("9.3",)

    def test_missing_key_returns_none(self, index):
        assert index.lookup("keywords", "graphql") is None

    def test_category_order_is_declaration_order(self, index):
        assert index.category_order() == (
            "code-quality", "testing", "api", "frontend", "security", "database",
        )

    def test_unknown_mapping_rejected(self, index):
        with pytest.raises(ValueError, match="Unknown index mapping"):
            index.mapping("owners")

    def test_mappings_are_read_only(self, index):
        with pytest.raises(TypeError):
            index.keywords["new"] = ("4.1",)

    def test_dangling_reference_rejected(self, index_data):
        index_data["keywords"]["graphql"] = ["4.1", "99.9"]
        with pytest.raises(DanglingPolicyReference) as exc_info:
            build_policy_index(index_data)
        assert exc_info.value.mapping == "keywords"
        assert exc_info.value.key == "graphql"
        assert exc_info.value.policy_id == "99.9"

    def test_dangling_reference_in_category(self, index_data):
        index_data["categories"]["security"].append("2.5")
        with pytest.raises(DanglingPolicyReference, match="2.5"):
            build_policy_index(index_data)

    def test_missing_mapping_rejected(self, index_data):
        del index_data["technologies"]
        with pytest.raises(ValidationError, match="technologies"):
            build_policy_index(index_data)

    def test_invalid_level_rejected(self, index_data):
        index_data["policy_details"]["4.1"]["level"] = "REQUIRED"
        with pytest.raises(ValidationError):
            build_policy_index(index_data)

    def test_non_string_key_rejected(self, index_data):
        """Unquoted YAML ids arrive as floats."""
        index_data["policy_details"][4.1] = index_data["policy_details"].pop("4.1")
        with pytest.raises(ValidationError, match="quoted string"):
            build_policy_index(index_data)

    def test_duplicate_normalized_keys_merge(self, index_data, caplog):
        index_data["technologies"]["NextJS"] = ["9.3", "1.2"]
        index = build_policy_index(index_data)
        assert index.lookup("technologies", "nextjs") == ("4.1", "9.3", "1.2")
        assert "duplicate key 'NextJS'" in caplog.text

    def test_duplicate_ids_in_entry_collapsed(self, index_data):
        index_data["keywords"]["errors"] = ["3.6", "9.3", "3.6"]
        index = build_policy_index(index_data)
        assert index.lookup("keywords", "errors") == ("3.6", "9.3")


class TestLoadPolicyIndex:
    """Tests for loading the index file from disk."""

    def test_load_json(self, index_file):
        index = load_policy_index(index_file)
        assert index.lookup("technologies", "postgres") == ("1.2",)

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "policy-index.yaml"
        path.write_text(
            "keywords:\n"
            "  validation: ['4.1']\n"
            "scenarios: {}\n"
            "technologies: {}\n"
            "categories:\n"
            "  security: ['4.1']\n"
            "policy_details:\n"
            "  '4.1':\n"
            "    title: Server-side input validation\n"
            "    level: MUST\n"
            "    category: Security\n"
        )
        index = load_policy_index(path)
        assert index.lookup("keywords", "validation") == ("4.1",)
        assert index.get("4.1").category == "security"

    def test_unquoted_yaml_id_rejected(self, tmp_path):
        path = tmp_path / "policy-index.yaml"
        path.write_text(
            "keywords: {}\n"
            "scenarios: {}\n"
            "technologies: {}\n"
            "categories: {}\n"
            "policy_details:\n"
            "  4.1:\n"
            "    title: Server-side input validation\n"
            "    level: MUST\n"
            "    category: security\n"
        )
        with pytest.raises(ValidationError, match="quoted string"):
            load_policy_index(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            load_policy_index(tmp_path / "nope.yaml")

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "policy-index.yaml"
        path.write_text("keywords: [unclosed\n")
        with pytest.raises(ValidationError, match="Invalid document"):
            load_policy_index(path)


class TestNormalizeKey:
    """Tests for normalize_key."""

    def test_trims_and_folds_case(self):
        assert normalize_key("  New API Endpoint ") == "new api endpoint"

    def test_idempotent(self):
        assert normalize_key(normalize_key(" NextJS ")) == normalize_key(" NextJS ")
