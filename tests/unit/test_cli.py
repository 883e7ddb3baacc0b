"""Tests for the command line interface."""
import base64
import hashlib

import pytest
import typer
from typer.testing import CliRunner

from chunkpy.cli import app
from chunkpy.cli.main import parse_headers

runner = CliRunner()


class TestParseHeaders:
    """Test suite for header option parsing."""
    
    def test_parses_name_and_value(self):
        headers = parse_headers(["Authorization: Bearer abc", "X-Trace:1"])
        
        assert headers == {'Authorization': 'Bearer abc', 'X-Trace': '1'}
    
    def test_value_may_contain_colons(self):
        assert parse_headers(["X-Url: http://a:8080"]) == {'X-Url': 'http://a:8080'}
    
    @pytest.mark.parametrize("value", ["no-separator", ": empty-name"])
    def test_invalid(self, value):
        with pytest.raises(typer.BadParameter):
            parse_headers([value])


class TestChecksumCommand:
    """Test suite for the checksum command."""
    
    def test_hex_output(self, make_file):
        content = b"cli checksum"
        path = make_file(content)
        
        result = runner.invoke(app, ["checksum", str(path), "--encoding", "hex"])
        
        assert result.exit_code == 0
        assert hashlib.sha256(content).hexdigest() in result.output
    
    def test_base64_sha512(self, make_file):
        content = b"cli checksum 512"
        path = make_file(content)
        
        result = runner.invoke(app, ["checksum", str(path), "-a", "SHA-512"])
        
        assert result.exit_code == 0
        expected = base64.b64encode(hashlib.sha512(content).digest()).decode()
        assert expected in result.output.replace("\n", "")
    
    def test_unsupported_algorithm(self, make_file):
        result = runner.invoke(app, ["checksum", str(make_file(b"x")), "-a", "md4"])
        
        assert result.exit_code == 2


class TestUploadCommand:
    """Test suite for the upload command."""
    
    def test_invalid_endpoint_template(self, make_file):
        result = runner.invoke(app, [
            "upload", str(make_file(b"x")),
            "--upload-url", "http://localhost/upload",
            "--finish-url", "http://localhost/finish/{upload_id}",
        ])
        
        assert result.exit_code == 2
        assert "upload_id" in result.output
    
    def test_invalid_chunk_size(self, make_file):
        """Test a zero chunk size exits cleanly before any request."""
        result = runner.invoke(app, [
            "upload", str(make_file(b"x")),
            "--upload-url", "http://127.0.0.1:1/upload/{upload_id}",
            "--finish-url", "http://127.0.0.1:1/finish/{upload_id}",
            "--chunk-size", "0",
        ])
        
        assert result.exit_code == 2
        assert "Invalid chunk size" in result.output
