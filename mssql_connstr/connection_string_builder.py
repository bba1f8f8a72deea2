"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string generation for every target driver.

Three output shapes, one renderer each:
- FlatRenderer: key=value; pairs (SqlClient, ODBC, OLEDB, PHP, Python)
- JdbcUrlRenderer: jdbc:sqlserver://host:port;property=value;
- RustStructRenderer: a ClientContext { ... } struct literal
"""

import re
from typing import Dict, List, Optional, Tuple

from mssql_connstr.constants import (
    ALL_DRIVERS,
    DEFAULT_ODBC_DRIVER,
    DEFAULT_PORT,
    DriverType,
    EscapeStyle,
    JDBC_URL_PREFIX,
    OutputFormatting,
    RenderStrategy,
    SERVER_KEYWORDS,
)
from mssql_connstr.drivers import RUST_ROOT_STRUCT, RUST_STRUCT_NAMES, get_profile
from mssql_connstr.escaping import escape_rust_string, escape_value
from mssql_connstr.helpers import normalize_boolean
from mssql_connstr.models import MappingResult, ParsedConnectionString, TranslationOptions

_INSTANCE = re.compile(r"^([^\\]+)\\(.+)$")
_HOST_PORT = re.compile(r"^([^:,\\]+)[,:](\d+)$")
_TCP_PREFIX = re.compile(r"^tcp:", re.IGNORECASE)

_ENCRYPTION_VARIANTS = {
    "true": "EncryptionSetting::On",
    "yes": "EncryptionSetting::On",
    "on": "EncryptionSetting::On",
    "optional": "EncryptionSetting::On",
    "mandatory": "EncryptionSetting::Required",
    "strict": "EncryptionSetting::Required",
    "required": "EncryptionSetting::Required",
    "false": "EncryptionSetting::Off",
    "no": "EncryptionSetting::Off",
    "off": "EncryptionSetting::Off",
}


def split_server(server: str) -> Tuple[str, Optional[int], Optional[str]]:
    """
    Split a server value into (host, port, instance_name).

    Accepts host\\instance, host,port and host:port. A leading tcp: is dropped.

    Examples:
        >>> split_server("tcp:myhost,1444")
        ('myhost', 1444, None)
        >>> split_server("myhost\\\\SQLEXPRESS")
        ('myhost', None, 'SQLEXPRESS')
    """
    server = _TCP_PREFIX.sub("", server.strip())
    instance = _INSTANCE.match(server)
    if instance:
        return instance.group(1), None, instance.group(2)
    host_port = _HOST_PORT.match(server)
    if host_port:
        return host_port.group(1), int(host_port.group(2)), None
    return server, None, None


class ConnectionStringBuilder:
    """
    Builds a flat key=value connection string for one driver.

    Parameters keep insertion order. Values are escaped with the driver's
    convention when they contain special characters.
    """

    def __init__(self, driver, initial_params: Optional[Dict[str, str]] = None):
        self._profile = get_profile(driver)
        self._params: Dict[str, str] = dict(initial_params) if initial_params else {}

    def add_param(self, key: str, value: str) -> 'ConnectionStringBuilder':
        """
        Add or update a connection parameter.

        Returns:
            Self for method chaining
        """
        self._params[key] = str(value)
        return self

    def has_param(self, key: str) -> bool:
        """Case-insensitive check for a parameter."""
        return any(existing.lower() == key.lower() for existing in self._params)

    def build(self, separator: str = ";") -> str:
        """
        Build the connection string: prefix, pairs joined by separator, trailing ';'.
        """
        parts = [f"{key}={self._escape_value(key, value)}" for key, value in self._params.items()]
        if not parts:
            return self._profile.prefix
        return self._profile.prefix + separator.join(parts) + ";"

    def _escape_value(self, key: str, value: str) -> str:
        """
        Escape a parameter value for the driver.

        Driver names are always braced where the driver accepts braces, so
        'ODBC Driver 18 for SQL Server' is written as {ODBC Driver 18 for SQL Server}.
        """
        if key.lower() == "driver" and self._profile.driver in (DriverType.ODBC, DriverType.PYTHON):
            if value.startswith("{") and value.endswith("}"):
                return value
            return "{" + value.replace("{", "{{").replace("}", "}}") + "}"
        return escape_value(value, self._profile.driver)


class Renderer:
    """Base class for the three output shapes."""

    def __init__(self, driver: DriverType):
        self.driver = driver

    @staticmethod
    def _separator(options: TranslationOptions) -> str:
        return "; " if options.readable else ";"

    def render(self, mapped: MappingResult, options: TranslationOptions,
               parsed: Optional[ParsedConnectionString] = None) -> str:
        raise NotImplementedError


class FlatRenderer(Renderer):
    """key=value; output with the driver's escaping and prefix."""

    def render(self, mapped, options, parsed=None) -> str:
        builder = ConnectionStringBuilder(self.driver)
        if self.driver is DriverType.ODBC and not any(
            translated.target_keyword.lower() == "driver" for translated in mapped.translated_keywords
        ):
            builder.add_param("Driver", DEFAULT_ODBC_DRIVER)
        for translated in mapped.translated_keywords:
            if not builder.has_param(translated.target_keyword):
                builder.add_param(translated.target_keyword, translated.target_value)
        return builder.build(self._separator(options))


class JdbcUrlRenderer(Renderer):
    """jdbc:sqlserver://host:port;property=value; output."""

    def render(self, mapped, options, parsed=None) -> str:
        host, port, instance_name = "localhost", DEFAULT_PORT, None

        server = mapped.mapped_pairs.get("server")
        if not server and parsed is not None:
            server = parsed.get_value("server")
        if server:
            host, parsed_port, instance_name = split_server(server)
            port = parsed_port or DEFAULT_PORT

        props: List[str] = []
        for translated in mapped.translated_keywords:
            if translated.canonical_id in SERVER_KEYWORDS:
                continue
            if instance_name and translated.canonical_id == "instancename":
                continue
            props.append(f"{translated.target_keyword}={escape_value(translated.target_value, EscapeStyle.BRACE)}")
        if instance_name:
            props.insert(0, f"instanceName={escape_value(instance_name, EscapeStyle.BRACE)}")

        props_str = self._separator(options).join(props)
        return f"{JDBC_URL_PREFIX}{host}:{port};{props_str}{';' if props_str else ''}"


class RustStructRenderer(Renderer):
    """ClientContext struct literal; fields that are not set fall back to Default."""

    def render(self, mapped, options, parsed=None) -> str:
        indent = "    " if options.readable else "  "
        nested_indent = indent * 2

        fields: Dict[str, str] = {}
        skipped: List[str] = []
        for translated in mapped.translated_keywords:
            if translated.canonical_id is None:
                skipped.append(f"{translated.target_keyword}={translated.target_value}")
                continue
            fields.setdefault(translated.target_keyword, translated.target_value)

        self._split_host_port(fields)

        simple: Dict[str, str] = {}
        grouped: Dict[str, Dict[str, str]] = {}
        for path, value in fields.items():
            top, _, rest = path.partition(".")
            if rest:
                grouped.setdefault(top, {})[rest] = self.format_value(value, rest)
            else:
                simple[path] = self.format_value(value, path)

        lines = [f"{RUST_ROOT_STRUCT} {{"]
        for field, value in simple.items():
            lines.append(f"{indent}{field}: {value},")
        for top, nested in grouped.items():
            lines.append(f"{indent}{top}: {RUST_STRUCT_NAMES.get(top, 'Unknown')} {{")
            for field, value in nested.items():
                lines.append(f"{nested_indent}{field}: {value},")
            lines.append(f"{indent}}},")
        for entry in skipped:
            lines.append(f"{indent}// {entry} (no ClientContext field)")
        lines.append(f"{indent}..Default::default()")
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _split_host_port(fields: Dict[str, str]) -> None:
        host = fields.get("transport_context.host")
        if host is None:
            return
        name, port, _ = split_server(host)
        if port is not None and "transport_context.port" not in fields:
            fields["transport_context.host"] = name
            fields["transport_context.port"] = str(port)
        else:
            fields["transport_context.host"] = _TCP_PREFIX.sub("", host)

    @staticmethod
    def format_value(value: str, field: str) -> str:
        """
        Render a value as a Rust expression.

        'mode' fields use EncryptionSetting variants; otherwise digits are bare
        integers, boolean-like text becomes true/false and anything else is a
        String.
        """
        if "mode" in field:
            variant = _ENCRYPTION_VARIANTS.get(value.strip().lower())
            if variant:
                return variant
        if value.isdigit():
            return value
        flag = normalize_boolean(value)
        if flag is not None:
            return "true" if flag else "false"
        return f"{escape_rust_string(value)}.to_string()"


_RENDERERS = {
    RenderStrategy.FLAT: FlatRenderer,
    RenderStrategy.JDBC_URL: JdbcUrlRenderer,
    RenderStrategy.RUST_STRUCT: RustStructRenderer,
}


def get_renderer(driver) -> Renderer:
    """Return the renderer for a driver's output shape."""
    profile = get_profile(driver)
    return _RENDERERS[profile.render_strategy](profile.driver)


def generate(mapped: MappingResult, target_driver, options=None,
             parsed: Optional[ParsedConnectionString] = None) -> str:
    """
    Render a mapping result as a connection string for the target driver.

    Args:
        mapped: Output of the mapper.
        target_driver: DriverType or driver tag.
        options: TranslationOptions, a mapping of option values, or None.
        parsed: The parsed source, used by the JDBC renderer to find the server
            when the mapping does not carry one.
    """
    options = TranslationOptions.resolve(options)
    return get_renderer(target_driver).render(mapped, options, parsed)


def generate_formatted(mapped: MappingResult, target_driver, pretty: bool = False,
                       parsed: Optional[ParsedConnectionString] = None) -> str:
    formatting = OutputFormatting.READABLE if pretty else OutputFormatting.COMPACT
    return generate(mapped, target_driver, TranslationOptions(formatting=formatting), parsed)


def generate_all(mapped: MappingResult, options=None,
                 parsed: Optional[ParsedConnectionString] = None) -> Dict[DriverType, str]:
    """Render one mapping result with every driver's renderer, in the fixed driver order."""
    options = TranslationOptions.resolve(options)
    return {driver: generate(mapped, driver, options, parsed) for driver in ALL_DRIVERS}
