"""Tests for semtype.orchestrator."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import pytest

from semtype.models import Classification, Version
from semtype.orchestrator import Orchestrator
from semtype.source_scanner import SourceParseError
from tests._fixtures.source_builder import SourceBuilder


@dataclass
class Scenario:
    name: str
    before_files: Dict[str, str] = field(default_factory=dict)
    before_version: str = "0.0.1"
    after_files: Dict[str, str] = field(default_factory=dict)
    after_version: str = "0.0.2"


SCENARIOS = [
    Scenario(name="empty directory"),
    Scenario(
        name="no changes to class",
        before_files={"api.py": "class Test:\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    pass\n"},
        after_version="0.1.1",
    ),
    Scenario(
        name="add private field",
        before_files={"api.py": "class Test:\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    _name: str\n"},
        after_version="0.1.1",
    ),
    Scenario(
        name="add private field after public one",
        before_files={"api.py": "class Test:\n    Name: str\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    Name: str\n    _age: int\n"},
        after_version="0.1.1",
    ),
    Scenario(
        name="add public field",
        before_files={"api.py": "class Test:\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    Name: str\n"},
        after_version="1.0.0",
    ),
    Scenario(
        name="add public function (minor)",
        before_files={"api.py": ""},
        before_version="0.0.1",
        after_files={"api.py": "def exported():\n    pass\n"},
        after_version="0.1.0",
    ),
    Scenario(
        name="add private function (patch)",
        before_files={"api.py": ""},
        before_version="0.0.1",
        after_files={"api.py": "def _helper():\n    pass\n"},
        after_version="0.0.2",
    ),
    Scenario(
        name="change public function signature (major)",
        before_files={"api.py": "def exported(a: int):\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "def exported(a: int, b: int):\n    pass\n"},
        after_version="1.0.0",
    ),
    Scenario(
        name="remove public function (major)",
        before_files={"api.py": "def exported():\n    pass\n"},
        before_version="0.1.0",
        after_files={},
        after_version="1.0.0",
    ),
    Scenario(
        name="change type of public field (major)",
        before_files={"api.py": "class Test:\n    Name: str\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    Name: int\n"},
        after_version="1.0.0",
    ),
    Scenario(
        name="add public method to public class (minor)",
        before_files={"api.py": "class Test:\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    def exported(self):\n        pass\n"},
        after_version="0.2.0",
    ),
    Scenario(
        name="remove public method (major)",
        before_files={"api.py": "class Test:\n    def exported(self):\n        pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    pass\n"},
        after_version="1.0.0",
    ),
    Scenario(
        name="private field plus new public function (minor)",
        before_files={"api.py": "class Test:\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "class Test:\n    _age: int\n\ndef exported():\n    pass\n"},
        after_version="0.2.0",
    ),
    Scenario(
        name="reformatting and comments only",
        before_files={"api.py": "def exported(a: int, b: str = 'x') -> bool:\n    return True\n"},
        before_version="0.1.0",
        after_files={
            "api.py": (
                "# a comment\n"
                "def exported(\n"
                "    a:int,   # first\n"
                "    b : str = \"x\",\n"
                ") -> bool:\n"
                "    '''Docstring.'''\n"
                "    return False\n"
            )
        },
        after_version="0.1.1",
    ),
    Scenario(
        name="remove one function and add another (major)",
        before_files={"api.py": "def old():\n    pass\n"},
        before_version="0.1.0",
        after_files={"api.py": "def new():\n    pass\n"},
        after_version="1.0.0",
    ),
    Scenario(
        name="name appended to __all__ (minor)",
        before_files={"api.py": "__all__ = ['a']\n\ndef a():\n    pass\n"},
        before_version="0.1.0",
        after_files={
            "api.py": (
                "__all__ = ['a']\n"
                "__all__ += ['b']\n\n"
                "def a():\n    pass\n\n"
                "def b():\n    pass\n"
            )
        },
        after_version="0.2.0",
    ),
]


@pytest.mark.parametrize("scenario", SCENARIOS, ids=lambda s: s.name)
def test_version_progression(source_builder: SourceBuilder, scenario: Scenario) -> None:
    source_builder.write(scenario.before_files)
    first = source_builder.run()
    assert str(first.version) == scenario.before_version

    source_builder.replace(scenario.after_files)
    second = source_builder.run()
    assert str(second.version) == scenario.after_version
    assert second.version > first.version


def test_unchanged_sources_only_advance_patch(source_builder: SourceBuilder) -> None:
    source_builder.write({"api.py": "class Client:\n    url: str\n"})
    versions = [str(source_builder.run().version) for _ in range(4)]
    assert versions == ["0.1.0", "0.1.1", "0.1.2", "0.1.3"]


def test_run_persists_state_schema(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {"api.py": "class Test:\n    Name: str\n\ndef exported(a: int) -> int:\n    return a\n"}
    )
    outcome = source_builder.run()

    assert outcome.persisted is True
    assert outcome.state_path == source_builder.state_path
    payload = json.loads(source_builder.state_path.read_text(encoding="utf-8"))
    assert payload == {
        "version": "0.1.0",
        "exported": {
            "types": {"Test": "class:\n    Name: str"},
            "functions": {"exported": "def(a: int) -> int"},
        },
    }


def test_dry_run_leaves_state_untouched(source_builder: SourceBuilder) -> None:
    source_builder.write({"api.py": "def exported():\n    pass\n"})
    source_builder.run()
    before = source_builder.state_path.read_text(encoding="utf-8")

    source_builder.write({"api.py": "def exported(flag: bool):\n    pass\n"})
    outcome = source_builder.run(dry_run=True)

    assert outcome.version == Version(1, 0, 0)
    assert outcome.persisted is False
    assert source_builder.state_path.read_text(encoding="utf-8") == before
    assert str(source_builder.run(dry_run=True).version) == "1.0.0"


def test_explicit_state_path_overrides_default(
    source_builder: SourceBuilder, tmp_path: Path
) -> None:
    state_path = tmp_path / "elsewhere" / "state.json"
    source_builder.write({"api.py": "def exported():\n    pass\n"})

    outcome = source_builder.run(state_path=state_path)

    assert outcome.state_path == state_path
    assert state_path.exists()
    assert not source_builder.state_path.exists()


def test_config_file_sets_state_location(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            ".semtype.yml": "state: .versioning/state.json\n",
            "api.py": "def exported():\n    pass\n",
        }
    )

    outcome = source_builder.run()

    assert outcome.state_path == source_builder.root.resolve() / ".versioning" / "state.json"
    assert outcome.state_path.exists()


def test_corrupt_version_starts_over(source_builder: SourceBuilder) -> None:
    source_builder.write({"api.py": "def exported():\n    pass\n"})
    source_builder.run()
    payload = json.loads(source_builder.state_path.read_text(encoding="utf-8"))
    payload["version"] = "v1.2"
    source_builder.state_path.write_text(json.dumps(payload), encoding="utf-8")

    outcome = source_builder.run()

    assert outcome.previous == Version(0, 0, 0)
    assert outcome.diff.classification is Classification.NO_CHANGE
    assert str(outcome.version) == "0.0.1"


def test_parse_failure_is_fatal_and_keeps_state(source_builder: SourceBuilder) -> None:
    source_builder.write({"api.py": "def exported():\n    pass\n"})
    source_builder.run()
    before = source_builder.state_path.read_text(encoding="utf-8")

    source_builder.write({"broken.py": "def broken(:\n"})
    with pytest.raises(SourceParseError):
        source_builder.run()

    assert source_builder.state_path.read_text(encoding="utf-8") == before


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run(tmp_path / "missing", state_path=tmp_path / "state.json")
