"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Static keyword table for SQL Server connection strings.

Each entry describes one canonical setting and how every driver spells it.
A driver that is not listed for a keyword cannot express that keyword as a
key=value pair (or, for Rust, as a ClientContext field). The table is a
versioned constant: changes to it are data changes.
"""

from typing import Dict, Optional, Tuple

from mssql_connstr.constants import DriverType, KeywordCategory, KeywordValueType
from mssql_connstr.models import DriverKeyword, Keyword

S = KeywordValueType.STRING
B = KeywordValueType.BOOLEAN
I = KeywordValueType.INTEGER
E = KeywordValueType.ENUM


def _rep(
    name: Optional[str],
    *synonyms: str,
    value_type: Optional[KeywordValueType] = None,
    default=None,
    required: bool = False,
    deprecated: bool = False,
    deprecation_message: Optional[str] = None,
    enum: Tuple[str, ...] = (),
    notes: Optional[str] = None,
) -> Dict:
    return {
        "name": name,
        "synonyms": tuple(synonyms),
        "value_type": value_type,
        "default_value": default,
        "required": required,
        "deprecated": deprecated,
        "deprecation_message": deprecation_message,
        "enum_values": tuple(enum),
        "notes": notes,
    }


def _keyword(
    keyword_id: str,
    display_name: str,
    category: KeywordCategory,
    value_type: KeywordValueType,
    description: str,
    **drivers: Dict,
) -> Keyword:
    """
    Build a Keyword, filling drivers that are not listed with an unnamed representation.
    Driver keyword arguments use the DriverType values (sqlclient=..., odbc=..., ...).
    """
    representations = {}
    for driver in DriverType:
        fields = drivers.get(driver.value)
        if fields is None:
            representations[driver] = DriverKeyword(name=None, value_type=value_type)
            continue
        fields = dict(fields)
        fields["value_type"] = fields["value_type"] or value_type
        representations[driver] = DriverKeyword(**fields)
    return Keyword(
        id=keyword_id,
        display_name=display_name,
        category=category,
        drivers=representations,
        description=description,
    )


_AUTH_SQLCLIENT = (
    "SqlPassword", "ActiveDirectoryPassword", "ActiveDirectoryIntegrated",
    "ActiveDirectoryInteractive", "ActiveDirectoryServicePrincipal",
    "ActiveDirectoryManagedIdentity", "ActiveDirectoryDefault",
)
_AUTH_ODBC = (
    "SqlPassword", "ActiveDirectoryPassword", "ActiveDirectoryIntegrated",
    "ActiveDirectoryInteractive", "ActiveDirectoryMsi",
)
_AUTH_JDBC = _AUTH_SQLCLIENT[:-1]
_AUTH_PHP = ("SqlPassword", "ActiveDirectoryPassword", "ActiveDirectoryIntegrated", "ActiveDirectoryMsi")
_INTENT = ("ReadWrite", "ReadOnly")
_ENABLED = ("Enabled", "Disabled")


KEYWORDS: Tuple[Keyword, ...] = (
    # ------------------------------------------------------------------ connection
    _keyword(
        "server", "Server/Host", KeywordCategory.CONNECTION, S,
        "The name or network address of the SQL Server instance",
        sqlclient=_rep("Server", "Data Source", "Address", "Addr", "Network Address", required=True),
        odbc=_rep("Server", "Address", "Addr", required=True),
        oledb=_rep("Data Source", required=True),
        jdbc=_rep(None, required=True, notes="In URL path: jdbc:sqlserver://HOST"),
        php=_rep("Server", required=True),
        python=_rep("Server", "Address", "Addr", required=True),
        rust=_rep("transport_context.host", required=True),
    ),
    _keyword(
        "database", "Database", KeywordCategory.CONNECTION, S,
        "The name of the database to connect to",
        sqlclient=_rep("Database", "Initial Catalog"),
        odbc=_rep("Database"),
        oledb=_rep("Initial Catalog"),
        jdbc=_rep("databaseName", "database"),
        php=_rep("Database"),
        python=_rep("Database"),
        rust=_rep("database"),
    ),
    _keyword(
        "port", "Port", KeywordCategory.CONNECTION, I,
        "TCP port number (default 1433)",
        sqlclient=_rep(None, default=1433, notes="Included in Server value: server,port"),
        odbc=_rep(None, default=1433, notes="Included in Server value"),
        oledb=_rep(None, default=1433),
        jdbc=_rep(None, default=1433, notes="In URL: jdbc:sqlserver://host:PORT"),
        php=_rep(None, default=1433, notes="Included in Server value"),
        python=_rep("Port", default=1433),
        rust=_rep("transport_context.port", default=1433),
    ),
    _keyword(
        "instancename", "Instance Name", KeywordCategory.CONNECTION, S,
        "Named instance to connect to",
        sqlclient=_rep(None, notes="Included in Server value: server\\instance"),
        odbc=_rep(None, notes="Included in Server value"),
        jdbc=_rep("instanceName"),
        php=_rep(None, notes="Included in Server value"),
    ),
    _keyword(
        "dsn", "Data Source Name", KeywordCategory.CONNECTION, S,
        "Name of an ODBC data source configured on the client",
        odbc=_rep("DSN"),
    ),
    # ------------------------------------------------------------------ auth
    _keyword(
        "userid", "User ID", KeywordCategory.AUTH, S,
        "SQL Server login username",
        sqlclient=_rep("User ID", "User", "UID"),
        odbc=_rep("UID", "User ID"),
        oledb=_rep("User ID"),
        jdbc=_rep("user"),
        php=_rep("UID"),
        python=_rep("User", "UID"),
        rust=_rep("auth.user"),
    ),
    _keyword(
        "password", "Password", KeywordCategory.AUTH, S,
        "SQL Server login password",
        sqlclient=_rep("Password", "PWD"),
        odbc=_rep("PWD", "Password"),
        oledb=_rep("Password"),
        jdbc=_rep("password"),
        php=_rep("PWD"),
        python=_rep("Password", "PWD"),
        rust=_rep("auth.password"),
    ),
    _keyword(
        "integratedsecurity", "Integrated Security", KeywordCategory.AUTH, B,
        "Use Windows Authentication",
        sqlclient=_rep("Integrated Security", "Trusted_Connection", default=False),
        odbc=_rep("Trusted_Connection", default=False, enum=("Yes", "No")),
        oledb=_rep("Integrated Security", value_type=E, enum=("SSPI",)),
        jdbc=_rep("integratedSecurity", default=False),
        php=_rep(None, notes="Use empty UID/PWD for Windows Auth"),
        python=_rep("Trusted_Connection", default=False),
        rust=_rep("auth.integrated_security", default=False),
    ),
    _keyword(
        "authentication", "Authentication", KeywordCategory.AUTH, E,
        "Authentication method (SQL, Windows, Azure AD)",
        sqlclient=_rep("Authentication", enum=_AUTH_SQLCLIENT),
        odbc=_rep("Authentication", enum=_AUTH_ODBC),
        jdbc=_rep("authentication", enum=_AUTH_JDBC),
        php=_rep("Authentication", enum=_AUTH_PHP),
        python=_rep("Authentication"),
        rust=_rep("auth.authentication_method"),
    ),
    _keyword(
        "serverspn", "Server SPN", KeywordCategory.AUTH, S,
        "Service Principal Name for the data source",
        sqlclient=_rep("ServerSPN", "Server SPN"),
        odbc=_rep("ServerSPN"),
        jdbc=_rep("serverSpn"),
    ),
    # ------------------------------------------------------------------ security
    _keyword(
        "encrypt", "Encrypt", KeywordCategory.SECURITY, E,
        "Encrypt connection to SQL Server",
        sqlclient=_rep("Encrypt", default="True", enum=("True", "False", "Strict", "Optional", "Mandatory")),
        odbc=_rep("Encrypt", default="yes", enum=("yes", "no", "strict", "true", "false")),
        oledb=_rep("Use Encryption for Data", value_type=B, default=False),
        jdbc=_rep("encrypt", default="true", enum=("true", "false", "strict")),
        php=_rep("Encrypt", value_type=B, default=False),
        python=_rep("Encrypt", value_type=B, default=False),
        rust=_rep("encryption_options.mode", enum=("On", "Off", "Required")),
    ),
    _keyword(
        "trustservercertificate", "Trust Server Certificate", KeywordCategory.SECURITY, B,
        "Trust the server certificate without validation",
        sqlclient=_rep("TrustServerCertificate", default=False),
        odbc=_rep("TrustServerCertificate", default=False, enum=("yes", "no")),
        oledb=_rep("Trust Server Certificate", default=False),
        jdbc=_rep("trustServerCertificate", default=False),
        php=_rep("TrustServerCertificate", default=False),
        python=_rep("TrustServerCertificate", default=False),
        rust=_rep("encryption_options.trust_server_certificate", default=False),
    ),
    _keyword(
        "hostnameincertificate", "Host Name In Certificate", KeywordCategory.SECURITY, S,
        "Host name to use for certificate validation",
        sqlclient=_rep("HostNameInCertificate"),
        odbc=_rep("HostNameInCertificate"),
        jdbc=_rep("hostNameInCertificate"),
        rust=_rep("encryption_options.host_name_in_cert"),
    ),
    _keyword(
        "servercertificate", "Server Certificate", KeywordCategory.SECURITY, S,
        "Path to certificate file for SQL Server TLS/SSL certificate validation",
        sqlclient=_rep("ServerCertificate", "Server Certificate"),
    ),
    _keyword(
        "columnencryption", "Column Encryption Setting", KeywordCategory.SECURITY, E,
        "Enable Always Encrypted",
        sqlclient=_rep("Column Encryption Setting", enum=_ENABLED),
        odbc=_rep("ColumnEncryption", enum=_ENABLED),
        jdbc=_rep("columnEncryptionSetting", enum=_ENABLED),
        php=_rep("ColumnEncryption", enum=_ENABLED),
    ),
    _keyword(
        "attestationprotocol", "Attestation Protocol", KeywordCategory.SECURITY, E,
        "Protocol for enclave attestation (NotSpecified, AAS, HGS, None)",
        sqlclient=_rep("Attestation Protocol", default="NotSpecified", enum=("NotSpecified", "AAS", "HGS", "None")),
        jdbc=_rep("enclaveAttestationProtocol", enum=("HGS", "AAS", "NONE")),
    ),
    _keyword(
        "enclaveattestationurl", "Enclave Attestation URL", KeywordCategory.SECURITY, S,
        "URL for enclave attestation service",
        sqlclient=_rep("Enclave Attestation Url"),
        jdbc=_rep("enclaveAttestationUrl"),
    ),
    _keyword(
        "persistsecurityinfo", "Persist Security Info", KeywordCategory.SECURITY, B,
        "Persist sensitive info in connection string",
        sqlclient=_rep("Persist Security Info", "PersistSecurityInfo", default=False),
        oledb=_rep("Persist Security Info", default=False),
    ),
    # ------------------------------------------------------------------ timeouts
    _keyword(
        "connecttimeout", "Connection Timeout", KeywordCategory.TIMEOUT, I,
        "Connection timeout in seconds",
        sqlclient=_rep("Connect Timeout", "Connection Timeout", "Timeout", default=15),
        odbc=_rep("Connection Timeout", default=15),
        oledb=_rep("Connect Timeout", default=15),
        jdbc=_rep("loginTimeout", default=15),
        php=_rep("LoginTimeout", default=15),
        python=_rep("Connection Timeout", default=15),
        rust=_rep("connect_timeout", default=15),
    ),
    _keyword(
        "commandtimeout", "Command Timeout", KeywordCategory.TIMEOUT, I,
        "Command/query timeout in seconds",
        sqlclient=_rep("Command Timeout", default=30),
        odbc=_rep(None, notes="Set programmatically"),
        jdbc=_rep("queryTimeout", default=0),
        rust=_rep("command_timeout"),
    ),
    # ------------------------------------------------------------------ app / network
    _keyword(
        "applicationname", "Application Name", KeywordCategory.APP_INFO, S,
        "Name of the client application",
        sqlclient=_rep("Application Name", "App"),
        odbc=_rep("APP"),
        oledb=_rep("Application Name"),
        jdbc=_rep("applicationName"),
        php=_rep("APP"),
        python=_rep("Application Name"),
        rust=_rep("application_name"),
    ),
    _keyword(
        "workstationid", "Workstation ID", KeywordCategory.APP_INFO, S,
        "Workstation identifier sent to server",
        sqlclient=_rep("Workstation ID", "WSID"),
        odbc=_rep("WSID"),
        oledb=_rep("Workstation ID"),
        jdbc=_rep("workstationID"),
        php=_rep("WSID"),
    ),
    _keyword(
        "packetsize", "Packet Size", KeywordCategory.NETWORK, I,
        "Network packet size in bytes",
        sqlclient=_rep("Packet Size", default=8000),
        oledb=_rep("Packet Size", default=4096),
        jdbc=_rep("packetSize", default=8000),
    ),
    _keyword(
        "keepalive", "Keep Alive", KeywordCategory.NETWORK, I,
        "Seconds between TCP keep-alive packets",
        odbc=_rep("KeepAlive", default=30),
        python=_rep("KeepAlive"),
    ),
    _keyword(
        "keepaliveinterval", "Keep Alive Interval", KeywordCategory.NETWORK, I,
        "Seconds between keep-alive retransmissions",
        odbc=_rep("KeepAliveInterval", default=1),
        python=_rep("KeepAliveInterval"),
    ),
    _keyword(
        "networklibrary", "Network Library", KeywordCategory.CONNECTION, S,
        "Network library used to establish connection (dbnmpntw, dbmssocn, etc.)",
        sqlclient=_rep("Network Library", "Network", "Net"),
        odbc=_rep("Network"),
        oledb=_rep("Network Library"),
    ),
    _keyword(
        "ipaddresspreference", "IP Address Preference", KeywordCategory.CONNECTION, E,
        "IP address family preference when establishing TCP connections",
        sqlclient=_rep("IPAddressPreference", "IP Address Preference", default="IPv4First",
                       enum=("IPv4First", "IPv6First", "UsePlatformDefault")),
    ),
    _keyword(
        "transparentnetworkipresolution", "Transparent Network IP Resolution", KeywordCategory.CONNECTION, B,
        "Enable parallel connection attempts to multiple IP addresses for a DNS entry",
        sqlclient=_rep("TransparentNetworkIPResolution", "Transparent Network IP Resolution", default=True),
        odbc=_rep("TransparentNetworkIPResolution"),
        php=_rep("TransparentNetworkIPResolution"),
    ),
    _keyword(
        "userinstance", "User Instance", KeywordCategory.CONNECTION, B,
        "Redirect connection to runtime-initiated instance under caller account",
        sqlclient=_rep("User Instance", default=False),
    ),
    # ------------------------------------------------------------------ HADR
    _keyword(
        "multisubnetfailover", "MultiSubnetFailover", KeywordCategory.HADR, B,
        "Enable multi-subnet failover for AlwaysOn",
        sqlclient=_rep("MultiSubnetFailover", default=False),
        odbc=_rep("MultiSubnetFailover", default=False, enum=("Yes", "No")),
        oledb=_rep("MultiSubnetFailover", default=False),
        jdbc=_rep("multiSubnetFailover", default=False),
        php=_rep("MultiSubnetFailover", default=False),
    ),
    _keyword(
        "failoverpartner", "Failover Partner", KeywordCategory.HADR, S,
        "Database mirroring failover partner server",
        sqlclient=_rep("Failover Partner"),
        odbc=_rep("Failover_Partner"),
        oledb=_rep("Failover Partner"),
        jdbc=_rep("failoverPartner"),
        php=_rep("Failover_Partner"),
    ),
    _keyword(
        "failoverpartnerspn", "Failover Partner SPN", KeywordCategory.HADR, S,
        "Service Principal Name for the failover partner",
        sqlclient=_rep("FailoverPartnerSPN", "Failover Partner SPN"),
        odbc=_rep("FailoverPartnerServerSPN"),
        jdbc=_rep("failoverPartnerSpn"),
    ),
    _keyword(
        "applicationintent", "Application Intent", KeywordCategory.HADR, E,
        "Routing intent for AlwaysOn read-only secondary",
        sqlclient=_rep("ApplicationIntent", "Application Intent", enum=_INTENT),
        odbc=_rep("ApplicationIntent", enum=_INTENT),
        oledb=_rep("Application Intent", enum=_INTENT),
        jdbc=_rep("applicationIntent", enum=_INTENT),
        php=_rep("ApplicationIntent", enum=_INTENT),
    ),
    # ------------------------------------------------------------------ pooling
    _keyword(
        "pooling", "Pooling", KeywordCategory.POOLING, B,
        "Enable connection pooling",
        sqlclient=_rep("Pooling", default=True),
        odbc=_rep(None, notes="Managed by driver manager"),
        oledb=_rep("OLE DB Services", value_type=I),
        jdbc=_rep(None, notes="Managed by connection pool"),
        php=_rep("ConnectionPooling", default=True),
    ),
    _keyword(
        "minpoolsize", "Min Pool Size", KeywordCategory.POOLING, I,
        "Minimum number of connections in pool",
        sqlclient=_rep("Min Pool Size", default=0),
    ),
    _keyword(
        "maxpoolsize", "Max Pool Size", KeywordCategory.POOLING, I,
        "Maximum number of connections in pool",
        sqlclient=_rep("Max Pool Size", default=100),
    ),
    _keyword(
        "connectionlifetime", "Connection Lifetime", KeywordCategory.POOLING, I,
        "Maximum lifetime of connection in pool (seconds)",
        sqlclient=_rep("Connection Lifetime", "Load Balance Timeout", default=0),
    ),
    _keyword(
        "poolblockingperiod", "Pool Blocking Period", KeywordCategory.POOLING, E,
        "Blocking period behavior for a connection pool (Auto, AlwaysBlock, NeverBlock)",
        sqlclient=_rep("PoolBlockingPeriod", "Pool Blocking Period", default="Auto",
                       enum=("Auto", "AlwaysBlock", "NeverBlock")),
    ),
    # ------------------------------------------------------------------ features
    _keyword(
        "mars", "Multiple Active Result Sets", KeywordCategory.FEATURES, B,
        "Enable MARS (Multiple Active Result Sets)",
        sqlclient=_rep("MultipleActiveResultSets", default=False),
        odbc=_rep("MARS_Connection", default=False, enum=("Yes", "No")),
        oledb=_rep("MARS Connection", default=False),
        jdbc=_rep(None, notes="Always enabled in JDBC"),
        php=_rep("MultipleActiveResultSets", default=False),
    ),
    _keyword(
        "replication", "Replication", KeywordCategory.FEATURES, B,
        "Enable replication support",
        sqlclient=_rep("Replication", default=False),
    ),
    _keyword(
        "asynchronousprocessing", "Asynchronous Processing", KeywordCategory.FEATURES, B,
        "Enable asynchronous operation support",
        sqlclient=_rep("Asynchronous Processing", "Async", default=False, deprecated=True,
                       deprecation_message="ignored since .NET Framework 4.5; async APIs are always available"),
    ),
    # ------------------------------------------------------------------ database
    _keyword(
        "attachdbfilename", "AttachDBFilename", KeywordCategory.DATABASE, S,
        "Primary database file for LocalDB attachment",
        sqlclient=_rep("AttachDBFilename", "Extended Properties", "Initial File Name"),
        odbc=_rep("AttachDBFilename"),
        oledb=_rep("AttachDBFilename"),
        php=_rep("AttachDBFilename"),
    ),
    _keyword(
        "language", "Current Language", KeywordCategory.DATABASE, S,
        "SQL Server language for messages",
        sqlclient=_rep("Current Language", "Language"),
        odbc=_rep("Language"),
        oledb=_rep("Current Language"),
        php=_rep("Language"),
    ),
    # ------------------------------------------------------------------ driver
    _keyword(
        "driver", "Driver", KeywordCategory.DRIVER, S,
        "ODBC driver name",
        odbc=_rep("Driver", required=True),
        python=_rep("Driver"),
    ),
    _keyword(
        "provider", "Provider", KeywordCategory.DRIVER, S,
        "OLEDB provider name",
        oledb=_rep("Provider", required=True),
    ),
    _keyword(
        "typesystemversion", "Type System Version", KeywordCategory.DRIVER, E,
        "SQL Server type system version",
        sqlclient=_rep("Type System Version", enum=(
            "SQL Server 2000", "SQL Server 2005", "SQL Server 2008", "SQL Server 2012", "Latest")),
    ),
    # ------------------------------------------------------------------ resiliency
    _keyword(
        "connectretrycount", "Connect Retry Count", KeywordCategory.RESILIENCY, I,
        "Number of reconnection attempts",
        sqlclient=_rep("ConnectRetryCount", "Connect Retry Count", default=1),
        odbc=_rep("ConnectRetryCount", default=1),
        jdbc=_rep("connectRetryCount", default=1),
        php=_rep("ConnectRetryCount", default=1),
    ),
    _keyword(
        "connectretryinterval", "Connect Retry Interval", KeywordCategory.RESILIENCY, I,
        "Seconds between reconnection attempts",
        sqlclient=_rep("ConnectRetryInterval", "Connect Retry Interval", default=10),
        odbc=_rep("ConnectRetryInterval", default=10),
        jdbc=_rep("connectRetryInterval", default=10),
        php=_rep("ConnectRetryInterval", default=10),
    ),
    # ------------------------------------------------------------------ behavior
    _keyword(
        "enlist", "Enlist", KeywordCategory.BEHAVIOR, B,
        "Automatic transaction enlistment",
        sqlclient=_rep("Enlist", default=True),
    ),
    _keyword(
        "transactionbinding", "Transaction Binding", KeywordCategory.BEHAVIOR, E,
        "Controls connection association with enlisted transaction",
        sqlclient=_rep("Transaction Binding", default="Implicit Unbind",
                       enum=("Implicit Unbind", "Explicit Unbind")),
    ),
)


KEYWORD_COUNT = len(KEYWORDS)
