"""Shared test fixtures for the Inkwell configuration test suite.

Every test runs in an empty temporary working directory with the loader's
environment variables cleared, so no real config.xml or .env leaks in.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from inkwell_config.config import reset_config

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<API REQUEST_DUMP="true">
    <CONTEXT>
        <PORT>8080</PORT>
        <HOST>0.0.0.0</HOST>
        <PATH>/api/v1</PATH>
        <TIME_ZONE>Europe/Madrid</TIME_ZONE>
        <ENABLE_BASIC_AUTH>false</ENABLE_BASIC_AUTH>
        <MODE>debug</MODE>
        <TRUSTED_PROXIES>
            <PROXY>10.0.0.1</PROXY>
            <PROXY>10.0.0.2</PROXY>
        </TRUSTED_PROXIES>
    </CONTEXT>
    <AUTHENTICATION MULTIPLE_SAME_USER_SESSIONS="true">
        <ENABLE_TOKEN_AUTH>true</ENABLE_TOKEN_AUTH>
        <SESSION_TIMEOUT>3600</SESSION_TIMEOUT>
    </AUTHENTICATION>
    <PAGINATION>
        <PAGE_SIZE>25</PAGE_SIZE>
    </PAGINATION>
    <DB>
        <INITIALIZE>true</INITIALIZE>
        <SERVER>postgres</SERVER>
        <HOST>db.internal</HOST>
        <PORT>5432</PORT>
        <DRIVER>pgx</DRIVER>
        <SSL_MODE>disable</SSL_MODE>
        <NAMES INKWELL="inkwell_db"/>
        <USERNAME>inkwell</USERNAME>
        <PASSWORD TYPE="plain">s3cret</PASSWORD>
        <POOL>
            <MAX_OPEN_CONNS>20</MAX_OPEN_CONNS>
            <MAX_IDLE_CONNS>5</MAX_IDLE_CONNS>
            <CONN_MAX_LIFETIME>300</CONN_MAX_LIFETIME>
        </POOL>
    </DB>
    <THIRD_PARTY>
        <HF_TOKEN>hf_abc123</HF_TOKEN>
        <OLLAMA_HOST>http://localhost:11434</OLLAMA_HOST>
    </THIRD_PARTY>
</API>
"""

ENV_XML = "<API><CONTEXT><PORT>9090</PORT><MODE>release</MODE></CONTEXT></API>"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Run each test in a clean working directory with a fresh singleton."""
    for var in ("CONFIG_XML", "CONFIG_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield tmp_path
    reset_config()


@pytest.fixture
def sample_xml() -> str:
    """Return a complete configuration document."""
    return SAMPLE_XML


@pytest.fixture
def env_xml() -> str:
    """Return a small configuration document distinct from sample_xml."""
    return ENV_XML


@pytest.fixture
def config_file(tmp_path: Path, sample_xml: str) -> Path:
    """Write sample_xml to a file and return its path."""
    path = tmp_path / "config.xml"
    path.write_text(sample_xml, encoding="utf-8")
    return path
