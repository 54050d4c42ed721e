"""Client connection configuration."""

import os
from typing import Any, Self
from urllib.parse import urlsplit

from botocore.credentials import Credentials
from opensearchpy import AWSV4SignerAsyncAuth, AWSV4SignerAuth, RequestsHttpConnection
from pydantic import BaseModel, Field, field_validator

_DEFAULT_PORTS = {"http": 80, "https": 443}


class ClientConfig(BaseModel):
    """Connection settings for the search service.

    Attributes:
        url: Service URL, e.g. http://localhost:9200
        username: HTTP basic auth user name
        password: HTTP basic auth password
        aws_region: Sign requests with SigV4 for this region (needs credentials)
        aws_service: SigV4 service name: "es" for managed domains, "aoss" for serverless
        verify_certs: Verify TLS certificates
        ca_certs: Path to a CA bundle
        timeout: Request timeout in seconds
        max_retries: Retries performed by the HTTP transport
        retry_on_timeout: Whether timeouts are retried by the HTTP transport
        http_compress: Gzip request bodies
        pool_maxsize: Connections kept per host
    """

    url: str = "http://localhost:9200"
    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    aws_region: str | None = None
    aws_service: str = "es"
    verify_certs: bool = True
    ca_certs: str | None = None
    timeout: float = Field(default=30, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_on_timeout: bool = False
    http_compress: bool = True
    pool_maxsize: int = Field(default=10, gt=0)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the URL has an http(s) scheme and a host."""
        parts = urlsplit(v.strip())
        if parts.scheme not in _DEFAULT_PORTS:
            raise ValueError(f"Unsupported URL scheme in '{v}', expected http or https")
        if not parts.hostname:
            raise ValueError(f"URL '{v}' has no host")
        try:
            parts.port  # noqa: B018
        except ValueError as e:
            raise ValueError(f"URL '{v}' has an invalid port") from e
        return v.strip().rstrip("/")

    @classmethod
    def from_env(cls, prefix: str = "ESDATA_") -> Self:
        """Read the configuration from environment variables.

        Every field maps to the upper-cased variable name with the prefix,
        e.g. ESDATA_URL or ESDATA_VERIFY_CERTS. Unset variables keep their defaults.
        """
        values = {
            name: os.environ[f"{prefix}{name.upper()}"]
            for name in cls.model_fields
            if f"{prefix}{name.upper()}" in os.environ
        }
        return cls.model_validate(values)

    @property
    def use_ssl(self) -> bool:
        return urlsplit(self.url).scheme == "https"

    def host(self) -> dict[str, Any]:
        parts = urlsplit(self.url)
        host: dict[str, Any] = {
            "host": parts.hostname,
            "port": parts.port or _DEFAULT_PORTS[parts.scheme],
        }
        if parts.path and parts.path != "/":
            host["url_prefix"] = parts.path
        return host

    def connection_kwargs(self, credentials: Credentials | None = None) -> dict[str, Any]:
        """Keyword arguments for opensearchpy.OpenSearch."""
        kwargs = self._common_kwargs()
        kwargs["connection_class"] = RequestsHttpConnection
        kwargs["pool_maxsize"] = self.pool_maxsize
        if self.aws_region and credentials is not None:
            kwargs["http_auth"] = AWSV4SignerAuth(credentials, self.aws_region, self.aws_service)
        return kwargs

    def async_connection_kwargs(self, credentials: Credentials | None = None) -> dict[str, Any]:
        """Keyword arguments for opensearchpy.AsyncOpenSearch."""
        kwargs = self._common_kwargs()
        kwargs["maxsize"] = self.pool_maxsize
        if self.aws_region and credentials is not None:
            kwargs["http_auth"] = AWSV4SignerAsyncAuth(credentials, self.aws_region, self.aws_service)
        return kwargs

    def _common_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "hosts": [self.host()],
            "use_ssl": self.use_ssl,
            "verify_certs": self.use_ssl and self.verify_certs,
            "ssl_show_warn": False,
            "http_compress": self.http_compress,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_on_timeout": self.retry_on_timeout,
        }
        if self.ca_certs:
            kwargs["ca_certs"] = self.ca_certs
        if self.username is not None:
            kwargs["http_auth"] = (self.username, self.password or "")
        return kwargs
