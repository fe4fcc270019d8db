"""Tests for YAML policy files."""

from pathlib import Path
from typing import Annotated

import pytest
from pydantic import BaseModel

from fieldcloak.core.descriptor import SensitivityDescriptor
from fieldcloak.core.exceptions import PolicyInheritanceError, PolicyValidationError
from fieldcloak.core.kinds import MaskKind
from fieldcloak.core.policy_loader import PolicyLoader, PolicySet, load_policies

BASE_POLICY = """
version: "1.0"
name: base
policies:
  email:
    kind: email
    allowed_roles: [ROLE_ADMIN]
  password:
    kind: generic
"""

CHILD_POLICY = """
version: "1.1"
name: customer
extends: base.yaml
policies:
  password:
    kind: generic
    show_first: 2
  account:
    showLast: 4
    maskChar: "#"
    allowedRoles: [ROLE_ADMIN, ROLE_AUDIT]
"""


def write(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestPolicyLoading:
    """Test loading single files."""

    def test_load_basic_file(self, tmp_path) -> None:
        policies = PolicyLoader().load(write(tmp_path, "base.yaml", BASE_POLICY))
        assert isinstance(policies, PolicySet)
        assert policies.name == "base"
        assert policies.names() == ["email", "password"]
        assert policies["email"] == SensitivityDescriptor(
            kind=MaskKind.EMAIL, allowed_roles=frozenset({"ROLE_ADMIN"})
        )
        assert policies["password"].always_masked

    def test_camel_case_keys(self, tmp_path) -> None:
        write(tmp_path, "base.yaml", BASE_POLICY)
        account = PolicyLoader().load(write(tmp_path, "child.yaml", CHILD_POLICY))["account"]
        assert account.show_last == 4
        assert account.mask_char == "#"
        assert account.allowed_roles == frozenset({"ROLE_ADMIN", "ROLE_AUDIT"})
        assert account.mask("ACC-000123") == "######0123"

    def test_relative_path_uses_base_path(self, tmp_path) -> None:
        write(tmp_path, "policies/base.yaml", BASE_POLICY)
        policies = PolicyLoader(base_path=tmp_path).load("policies/base.yaml")
        assert policies.source == (tmp_path / "policies" / "base.yaml").resolve()

    def test_empty_file(self, tmp_path) -> None:
        policies = PolicyLoader().load(write(tmp_path, "empty.yaml", ""))
        assert len(policies) == 0
        assert policies.name is None

    def test_load_policies_helper(self, tmp_path) -> None:
        assert "email" in load_policies(write(tmp_path, "base.yaml", BASE_POLICY))

    def test_descriptors_usable_as_annotations(self, tmp_path) -> None:
        policies = load_policies(write(tmp_path, "base.yaml", BASE_POLICY))

        class Contact(BaseModel):
            email: Annotated[str, policies["email"]]

        assert Contact(email="jane@example.com").model_dump() == {"email": "j**e@example.com"}


class TestPolicyInheritance:
    """Test the extends mechanism."""

    def test_child_overrides_base(self, tmp_path) -> None:
        write(tmp_path, "base.yaml", BASE_POLICY)
        policies = PolicyLoader().load(write(tmp_path, "child.yaml", CHILD_POLICY))
        assert policies.name == "customer"
        assert policies.names() == ["account", "email", "password"]
        assert policies["password"].show_first == 2
        assert policies["email"].kind is MaskKind.EMAIL

    def test_multiple_bases_later_wins(self, tmp_path) -> None:
        write(tmp_path, "a.yaml", "policies:\n  token: {kind: generic}\n  phone: {kind: phone_number}\n")
        write(tmp_path, "b.yaml", "policies:\n  token: {kind: generic, show_last: 3}\n")
        child = write(tmp_path, "child.yaml", "extends: [a.yaml, b.yaml]\npolicies: {}\n")
        policies = PolicyLoader().load(child)
        assert policies["token"].show_last == 3
        assert policies["phone"].kind is MaskKind.PHONE_NUMBER

    def test_nested_directories(self, tmp_path) -> None:
        write(tmp_path, "shared/base.yaml", BASE_POLICY)
        child = write(tmp_path, "apps/child.yaml", "extends: ../shared/base.yaml\n")
        assert PolicyLoader().load(child).names() == ["email", "password"]

    def test_circular_inheritance(self, tmp_path) -> None:
        write(tmp_path, "a.yaml", "extends: b.yaml\n")
        write(tmp_path, "b.yaml", "extends: a.yaml\n")
        with pytest.raises(PolicyInheritanceError, match="Circular inheritance") as exc_info:
            PolicyLoader().load(tmp_path / "a.yaml")
        chain = exc_info.value.context["inheritance_chain"]
        assert Path(chain[0]).name == "a.yaml"
        assert Path(chain[-1]).name == "a.yaml"

    def test_self_inheritance(self, tmp_path) -> None:
        path = write(tmp_path, "self.yaml", "extends: self.yaml\n")
        with pytest.raises(PolicyInheritanceError):
            PolicyLoader().load(path)

    def test_missing_base(self, tmp_path) -> None:
        path = write(tmp_path, "child.yaml", "extends: nowhere.yaml\n")
        with pytest.raises(FileNotFoundError, match="nowhere.yaml"):
            PolicyLoader().load(path)


class TestPolicyValidation:
    """Test rejection of malformed files."""

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError, match="Policy file not found"):
            PolicyLoader().load(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        path = write(tmp_path, "bad.yaml", "policies: [unclosed\n")
        with pytest.raises(PolicyValidationError, match="Invalid YAML"):
            PolicyLoader().load(path)

    def test_top_level_must_be_mapping(self, tmp_path) -> None:
        path = write(tmp_path, "list.yaml", "- email\n- password\n")
        with pytest.raises(PolicyValidationError, match="mapping at top level"):
            PolicyLoader().load(path)

    @pytest.mark.parametrize(
        "content",
        [
            "policies:\n  ssn: {kind: ssn}\n",
            "policies:\n  email: {kind: email, colour: red}\n",
            "policies:\n  token: {show_first: -1}\n",
            "policies:\n  token: {mask_char: '##'}\n",
            "version: v1\n",
            "unexpected: true\n",
            "policies:\n  '1bad': {kind: generic}\n",
        ],
    )
    def test_schema_errors(self, tmp_path, content) -> None:
        path = write(tmp_path, "invalid.yaml", content)
        with pytest.raises(PolicyValidationError, match="Schema validation failed") as exc_info:
            PolicyLoader().load(path)
        assert exc_info.value.context["policy_file"] == str(path.resolve())

    def test_invalid_role_entry(self, tmp_path) -> None:
        path = write(tmp_path, "roles.yaml", "policies:\n  email:\n    allowed_roles: ['']\n")
        with pytest.raises(PolicyValidationError, match="Invalid policy 'email'") as exc_info:
            PolicyLoader().load(path)
        assert exc_info.value.context["policy_name"] == "email"


class TestPolicySet:
    """Test the mapping returned by the loader."""

    @pytest.fixture
    def policies(self) -> PolicySet:
        return PolicyLoader().load_from_mapping(
            {
                "name": "inline",
                "policies": {
                    "card": {"kind": "credit_card"},
                    "note": {"kind": "generic", "show_first": 1, "allowed_roles": ["ROLE_ADMIN"]},
                },
            }
        )

    def test_mapping_protocol(self, policies) -> None:
        assert len(policies) == 2
        assert set(policies) == {"card", "note"}
        assert policies.get("missing") is None

    def test_unknown_policy(self, policies) -> None:
        with pytest.raises(KeyError, match="Unknown policy 'ssn'"):
            policies["ssn"]

    def test_to_dict(self, policies) -> None:
        assert policies.to_dict()["note"] == {
            "kind": "generic",
            "show_first": 1,
            "show_last": 0,
            "mask_char": "*",
            "allowed_roles": ["ROLE_ADMIN"],
        }

    def test_repr(self, policies) -> None:
        assert repr(policies) == "PolicySet(name='inline', policies=['card', 'note'])"

    def test_mapping_rejects_extends(self) -> None:
        with pytest.raises(PolicyValidationError, match="requires loading from a file"):
            PolicyLoader().load_from_mapping({"extends": "base.yaml"})

    def test_mapping_schema_errors(self) -> None:
        with pytest.raises(PolicyValidationError, match="Schema validation failed"):
            PolicyLoader().load_from_mapping({"policies": {"x": {"kind": "nope"}}})
