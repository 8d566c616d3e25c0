import json
import sys
from pathlib import Path

import pytest

# tests live at <repo>/tests/ so repo root is 1 parent above.
REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.image_fixtures import A1111_PARAMETERS, comfy_api_prompt, comfy_editor_workflow, swarmui_payload  # noqa: E402


@pytest.fixture
def a1111_text() -> str:
    return A1111_PARAMETERS


@pytest.fixture
def comfy_prompt() -> dict:
    return comfy_api_prompt()


@pytest.fixture
def comfy_workflow() -> dict:
    return comfy_editor_workflow()


@pytest.fixture
def comfy_prompt_json(comfy_prompt) -> str:
    return json.dumps(comfy_prompt)


@pytest.fixture
def swarm_payload() -> dict:
    return swarmui_payload()
