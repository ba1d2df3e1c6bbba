"""Pydantic v2 models for the Inkwell XML configuration record.

Each model maps XML attributes, child elements and character data onto typed
fields by alias. ``APIConfig.from_xml`` turns a whole document into a record.
Anything absent from the document keeps its zero value.
"""

from __future__ import annotations

import typing
import xml.etree.ElementTree as ET
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    model_validator,
)

from inkwell_config.exceptions import ConfigParseError

ROOT_TAG = "API"
ATTR_PREFIX = "@"
TEXT_KEY = "#text"
SECRET_MASK = "********"


def _xml_number(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or 0
    return value


def _xml_flag(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or False
    return value


XmlInt = Annotated[int, BeforeValidator(_xml_number)]
XmlBool = Annotated[bool, BeforeValidator(_xml_flag)]


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


def element_to_data(element: ET.Element) -> dict[str, Any]:
    """Convert an element into a dict of attributes, child element lists and text.

    Attributes are keyed ``@NAME`` and map to strings, every child tag maps to
    the list of its occurrences in document order, and the element's own
    character data is stored under ``TEXT_KEY``.
    """
    data: dict[str, Any] = {
        ATTR_PREFIX + _local_name(key): value for key, value in element.attrib.items()
    }
    text = [element.text or ""]
    for child in element:
        data.setdefault(_local_name(child.tag), []).append(element_to_data(child))
        text.append(child.tail or "")
    data[TEXT_KEY] = "".join(text)
    return data


def _merge_elements(elements: list[dict[str, Any]]) -> dict[str, Any]:
    """Fold repeated occurrences of one element into a single dict.

    Child element lists concatenate in document order; attributes and text
    from later occurrences replace earlier ones.
    """
    merged: dict[str, Any] = {}
    for element in elements:
        for key, value in element.items():
            if isinstance(value, list) and isinstance(merged.get(key), list):
                merged[key] = merged[key] + value
            else:
                merged[key] = value
    return merged


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _text_of(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get(TEXT_KEY, "")
    return value


class XmlModel(BaseModel):
    """Base for records deserialized from ``element_to_data`` output.

    Field aliases name the XML source: ``@NAME`` for an attribute, ``#text``
    for character data, a bare tag for a child element. When validated with
    an ``{"xml": True}`` context, keys that are not aliases are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_elements(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict) or not (info.context or {}).get("xml"):
            return data
        fields = {field.alias: field for field in cls.model_fields.values() if field.alias}
        unwrapped: dict[str, Any] = {}
        for key, value in data.items():
            field = fields.get(key)
            if field is None:
                continue
            if typing.get_origin(field.annotation) is list:
                items = value if isinstance(value, list) else [value]
                unwrapped[key] = [_text_of(item) for item in items]
            elif _is_model(field.annotation):
                unwrapped[key] = _merge_elements(value) if isinstance(value, list) else value
            else:
                if isinstance(value, list):
                    if not value:
                        continue
                    # Repeated scalar element: last one wins.
                    value = value[-1]
                unwrapped[key] = _text_of(value)
        return unwrapped


class TrustedProxiesConfig(XmlModel):
    """Trusted reverse proxy addresses."""

    proxies: list[str] = Field(default_factory=list, alias="PROXY")


class ContextConfig(XmlModel):
    """Basic server settings."""

    port: XmlInt = Field(0, alias="PORT")
    host: str = Field("", alias="HOST")
    path: str = Field("", alias="PATH")
    time_zone: str = Field("", alias="TIME_ZONE")
    enable_basic_auth: XmlBool = Field(False, alias="ENABLE_BASIC_AUTH")
    mode: str = Field("", alias="MODE")
    trusted_proxies: TrustedProxiesConfig = Field(default_factory=TrustedProxiesConfig, alias="TRUSTED_PROXIES")

    @property
    def is_debug(self) -> bool:
        return self.mode.strip().lower() == "debug"

    @property
    def is_release(self) -> bool:
        return self.mode.strip().lower() == "release"


class AuthenticationConfig(XmlModel):
    """Authentication settings."""

    multiple_same_user_sessions: XmlBool = Field(False, alias="@MULTIPLE_SAME_USER_SESSIONS")
    enable_token_auth: XmlBool = Field(False, alias="ENABLE_TOKEN_AUTH")
    session_timeout: XmlInt = Field(0, alias="SESSION_TIMEOUT")


class PaginationConfig(XmlModel):
    """Default page size for list endpoints."""

    page_size: XmlInt = Field(0, alias="PAGE_SIZE")


class DBNames(XmlModel):
    """Database names declared as attributes of the NAMES element."""

    inkwell: str = Field("", alias="@INKWELL")


class DBPassword(XmlModel):
    """Database password with its declared type (plain, env, ...)."""

    type: str = Field("", alias="@TYPE")
    value: str = Field("", alias=TEXT_KEY, repr=False)


class DBPoolConfig(XmlModel):
    """Connection pool sizing and lifetime."""

    max_open_conns: XmlInt = Field(0, alias="MAX_OPEN_CONNS")
    max_idle_conns: XmlInt = Field(0, alias="MAX_IDLE_CONNS")
    conn_max_lifetime: XmlInt = Field(0, alias="CONN_MAX_LIFETIME")


class DBConfig(XmlModel):
    """Database connection settings."""

    initialize: XmlBool = Field(False, alias="INITIALIZE")
    server: str = Field("", alias="SERVER")
    host: str = Field("", alias="HOST")
    port: XmlInt = Field(0, alias="PORT")
    driver: str = Field("", alias="DRIVER")
    ssl_mode: str = Field("", alias="SSL_MODE")
    names: DBNames = Field(default_factory=DBNames, alias="NAMES")
    username: str = Field("", alias="USERNAME")
    password: DBPassword = Field(default_factory=DBPassword, alias="PASSWORD")
    pool: DBPoolConfig = Field(default_factory=DBPoolConfig, alias="POOL")


class ThirdPartyConfig(XmlModel):
    """Credentials and endpoints for external services."""

    hf_token: str = Field("", alias="HF_TOKEN", repr=False)
    ollama_host: str = Field("", alias="OLLAMA_HOST")


class APIConfig(XmlModel):
    """The root <API> configuration record."""

    request_dump: XmlBool = Field(False, alias="@REQUEST_DUMP")
    context: ContextConfig = Field(default_factory=ContextConfig, alias="CONTEXT")
    authentication: AuthenticationConfig = Field(default_factory=AuthenticationConfig, alias="AUTHENTICATION")
    pagination: PaginationConfig = Field(default_factory=PaginationConfig, alias="PAGINATION")
    db: DBConfig = Field(default_factory=DBConfig, alias="DB")
    third_party: ThirdPartyConfig = Field(default_factory=ThirdPartyConfig, alias="THIRD_PARTY")

    @classmethod
    def from_xml(cls, document: str | bytes) -> APIConfig:
        """Parse an XML document into an APIConfig.

        Args:
            document: The XML text. Bytes are decoded according to the XML
                declaration.

        Returns:
            The populated configuration record.

        Raises:
            ConfigParseError: If the document is malformed, its root element is
                not <API>, or a value cannot be coerced to its field type.
        """
        try:
            root = ET.fromstring(document)
        except ET.ParseError as exc:
            raise ConfigParseError(f"Malformed XML: {exc}", details={"position": exc.position}) from exc
        except (LookupError, ValueError) as exc:
            # Unknown or unusable encoding named in the XML declaration.
            raise ConfigParseError(f"Cannot decode XML: {exc}", details={"reason": str(exc)}) from exc

        tag = _local_name(root.tag)
        if tag != ROOT_TAG:
            raise ConfigParseError(
                f"Expected root element <{ROOT_TAG}>, got <{tag}>",
                details={"root": tag},
            )

        try:
            return cls.model_validate(element_to_data(root), context={"xml": True})
        except ValidationError as exc:
            raise ConfigParseError(
                f"Invalid configuration values: {exc.error_count()} error(s)",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    def redacted(self) -> dict[str, Any]:
        """Return the record as a plain dict with secrets masked."""
        data = self.model_dump()
        if data["db"]["password"]["value"]:
            data["db"]["password"]["value"] = SECRET_MASK
        if data["third_party"]["hf_token"]:
            data["third_party"]["hf_token"] = SECRET_MASK
        return data
