import pytest

from applesoft.applesoft_interpreter import Interpreter


@pytest.fixture  # type: ignore[misc]
def output() -> list[str]:
    return []


@pytest.fixture  # type: ignore[misc]
def interpreter(output: list[str]) -> Interpreter:
    return Interpreter(on_output=output.append)
