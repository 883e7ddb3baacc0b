"""Tests for HTTP session configuration."""
import ssl

import aiohttp
import pytest

from chunkpy import HTTPConfig, SSLConfig, TimeoutConfig, UploadCoordinator


class TestTimeoutConfig:
    """Test suite for TimeoutConfig."""
    
    def test_to_aiohttp_timeout(self):
        timeout = TimeoutConfig(total=600, connect=5, sock_read=60, sock_connect=5)
        
        result = timeout.to_aiohttp_timeout()
        
        assert isinstance(result, aiohttp.ClientTimeout)
        assert result.total == 600
        assert result.connect == 5
        assert result.sock_read == 60
    
    def test_no_total_cap_by_default(self):
        assert TimeoutConfig().to_aiohttp_timeout().total is None


class TestSSLConfig:
    """Test suite for SSLConfig."""
    
    def test_verify_creates_context(self):
        context = SSLConfig().create_ssl_context()
        
        assert isinstance(context, ssl.SSLContext)
        assert context.check_hostname is True
    
    def test_no_verify(self):
        assert SSLConfig(verify=False).create_ssl_context() is False


class TestHTTPConfig:
    """Test suite for HTTPConfig."""
    
    def test_connector_kwargs(self):
        kwargs = HTTPConfig(limit=3, limit_per_host=2).get_connector_kwargs()
        
        assert kwargs['limit'] == 3
        assert kwargs['limit_per_host'] == 2
        assert 'ssl' in kwargs
    
    def test_session_kwargs(self):
        kwargs = HTTPConfig(user_agent='tester/1').get_session_kwargs()
        
        assert kwargs['headers'] == {'User-Agent': 'tester/1'}
        assert isinstance(kwargs['timeout'], aiohttp.ClientTimeout)
    
    def test_insecure(self):
        config = HTTPConfig.insecure()
        
        assert config.ssl.verify is False
        assert config.get_connector_kwargs()['ssl'] is False


class TestSessionCreation:
    """Test suite for sessions built by the coordinator."""
    
    @pytest.mark.asyncio
    async def test_dummy_cookie_jar_by_default(self, make_config):
        session = UploadCoordinator(make_config()).create_session()
        try:
            assert isinstance(session.cookie_jar, aiohttp.DummyCookieJar)
        finally:
            await session.close()
    
    @pytest.mark.asyncio
    async def test_credentials_include_keeps_cookies(self, make_config):
        config = make_config(headers={'credentials': 'include'})
        session = UploadCoordinator(config).create_session()
        try:
            assert isinstance(session.cookie_jar, aiohttp.CookieJar)
        finally:
            await session.close()
