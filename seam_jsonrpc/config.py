"""
Configuration settings for the JSON-RPC client
"""
import os
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class ProtocolVersion(Enum):
    """Supported JSON-RPC protocol versions"""
    V1_0 = "1.0"
    V2_0 = "2.0"


class TransportType:
    """Transport type constants"""
    HTTP = "http"
    ZEROMQ = "zeromq"

    ALL = (HTTP, ZEROMQ)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Main configuration for a JSON-RPC service endpoint"""
    url: str
    protocol_version: ProtocolVersion = ProtocolVersion.V2_0
    transport: str = TransportType.HTTP
    timeout_ms: int = 5000

    # Extra HTTP headers sent with every request (HTTP transport only)
    headers: Dict[str, str] = field(default_factory=dict)

    # Tracing configuration
    enable_tracing: bool = True
    service_name: str = "seam_jsonrpc.client"

    def __post_init__(self):
        if not isinstance(self.protocol_version, ProtocolVersion):
            self.protocol_version = ProtocolVersion(self.protocol_version)
        if self.transport not in TransportType.ALL:
            raise ValueError(f"Unsupported transport: {self.transport}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")

    @classmethod
    def from_env(cls, url: Optional[str] = None) -> "ClientConfig":
        """Create config from environment variables"""
        url = url or os.getenv("SEAM_JSONRPC_URL")
        if not url:
            raise ValueError("No service URL given and SEAM_JSONRPC_URL is not set")

        return cls(
            url=url,
            protocol_version=ProtocolVersion(os.getenv("SEAM_JSONRPC_VERSION", "2.0")),
            transport=os.getenv("SEAM_JSONRPC_TRANSPORT", TransportType.HTTP).lower(),
            timeout_ms=int(os.getenv("SEAM_JSONRPC_TIMEOUT_MS", "5000")),
            enable_tracing=_parse_bool(os.getenv("SEAM_JSONRPC_TRACING", "true")),
            service_name=os.getenv("SEAM_JSONRPC_SERVICE_NAME", "seam_jsonrpc.client"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "url": self.url,
            "protocol_version": self.protocol_version.value,
            "transport": self.transport,
            "timeout_ms": self.timeout_ms,
            "header_names": sorted(self.headers),
            "enable_tracing": self.enable_tracing,
            "service_name": self.service_name,
        }
