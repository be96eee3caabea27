"""Shared fixtures: generated text samples as a model would stream them."""

import pytest

from codeharvest.core import config as config_module


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CODEHARVEST_* variables from the shell out of the tests."""
    import os

    for name in list(os.environ):
        if name.startswith(config_module.ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *a, **k: False)


@pytest.fixture
def two_file_output() -> str:
    return (
        "FILE: src/App.tsx\n"
        "```tsx\n"
        "export const App = () => null;\n"
        "```\n"
        "FILE: src/index.ts\n"
        "```ts\n"
        "console.log(1);\n"
        "```"
    )


@pytest.fixture
def spring_output() -> str:
    return (
        "Here is your project.\n\n"
        "FILE: pom.xml\n"
        "```xml\n"
        "<project>\n  <modelVersion>4.0.0</modelVersion>\n</project>\n"
        "```\n\n"
        "FILE: src/main/java/com/example/User.java\n"
        "```java\n"
        "package com.example;\n\npublic class User {\n    private Long id;\n}\n"
        "```\n\n"
        "FILE: src/main/resources/application.properties\n"
        "```properties\n"
        "server.port=8080\n"
        "```\n"
    )
