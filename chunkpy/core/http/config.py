"""
HTTP configuration module.

Provides the settings used to build the aiohttp session shared by the
chunk transport and the finalization verifier.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
import ssl

import aiohttp


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.
    
    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True
    
    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False  # Disable SSL verification
        
        context = ssl.create_default_context()
        
        if self.ca_file:
            context.load_verify_locations(self.ca_file)
        
        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )
        
        context.check_hostname = self.check_hostname
        
        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.
    
    Chunks can be large, so the total timeout is generous and the
    read timeout guards against a stalled server.
    """
    total: Optional[float] = None  # No overall cap per request
    connect: float = 30.0
    sock_read: float = 120.0
    sock_connect: float = 30.0
    
    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        """Convert to aiohttp ClientTimeout."""
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class HTTPConfig:
    """
    HTTP client configuration.
    
    Centralizes the options used to create the aiohttp session.
    """
    user_agent: str = 'chunkpy/1.0.0'
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    
    # Connection pool settings
    limit_per_host: int = 4
    limit: int = 10
    keepalive_timeout: float = 30.0
    
    @classmethod
    def default(cls) -> 'HTTPConfig':
        """Create default configuration."""
        return cls()
    
    @classmethod
    def insecure(cls, **kwargs) -> 'HTTPConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )
    
    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'keepalive_timeout': self.keepalive_timeout,
            'ssl': self.ssl.create_ssl_context(),
        }
    
    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        return {
            'headers': {'User-Agent': self.user_agent},
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
