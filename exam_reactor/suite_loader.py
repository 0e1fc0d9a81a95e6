"""Loading of suite definitions from suite.yaml files."""

import asyncio
from pathlib import Path

import yaml
from pydantic import ValidationError

from exam_reactor.models.suite import SuiteDefinition


async def load_suite_definition(path: Path) -> SuiteDefinition:
    """Load and validate a suite definition.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML, is empty or does not match
            the suite schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Suite file not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty suite file: {path}")

    try:
        return SuiteDefinition.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid suite definition schema in {path}: {e}") from e
