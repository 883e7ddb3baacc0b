"""Pytest fixtures for chunkpy tests."""
import asyncio
import base64
import hashlib
import os
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web, test_utils

from chunkpy import Endpoints, ThrottleConfig, UploadConfig


class FakeStore:
    """
    In-process remote store implementing the upload/finish contract.
    
    Upload requests place bytes at the offset of their Range header; a
    ``create=1`` query is refused with 409 once content was finalized at
    that id. The finish endpoint returns the stored hash and length.
    """
    
    def __init__(self):
        self.objects: Dict[str, bytearray] = {}
        self.completed = set()
        self.upload_requests: List[Dict[str, Any]] = []
        self.finish_requests: List[Dict[str, Any]] = []
        
        # Behaviour switches
        self.fail_status: Optional[int] = None
        self.fail_on_request: Optional[int] = None
        self.finish_status = 200
        self.hash_encoding = 'base64'
        self.hash_prefix = 'sha-256='
        self.hash_override: Optional[str] = None
        self.length_override: Optional[Any] = None
        self.omit_hash = False
        self.send_digest = False
        self.block_on_request: Optional[int] = None
        self.stall_body_on_request: Optional[int] = None
        
        self.blocked = asyncio.Event()
        self.release = asyncio.Event()
        self.base_url = ''
        
        self.app = web.Application(client_max_size=64 * 1024 * 1024)
        self.app.router.add_route('PUT', '/upload/{upload_id:.+}', self.handle_upload)
        self.app.router.add_route('POST', '/upload/{upload_id:.+}', self.handle_upload)
        self.app.router.add_route('GET', '/finish/{upload_id:.+}', self.handle_finish)
        self.app.router.add_route('POST', '/finish/{upload_id:.+}', self.handle_finish)
    
    def endpoints(self) -> Endpoints:
        return Endpoints(
            upload=f"{self.base_url}/upload/{{upload_id}}",
            finish=f"{self.base_url}/finish/{{upload_id}}",
        )
    
    def encode(self, data: bytes) -> str:
        digest = hashlib.sha256(bytes(data)).digest()
        if self.hash_encoding == 'hex':
            return digest.hex()
        return base64.b64encode(digest).decode()
    
    def record_upload(self, request: web.Request, upload_id: str, length: int) -> None:
        self.upload_requests.append({
            'upload_id': upload_id,
            'method': request.method,
            'range': request.headers.get('Range'),
            'create': request.query.get('create'),
            'content_type': request.headers.get('Content-Type'),
            'headers': dict(request.headers),
            'length': length,
        })
    
    async def handle_upload(self, request: web.Request) -> web.Response:
        upload_id = request.match_info['upload_id']
        index = len(self.upload_requests)
        if self.stall_body_on_request == index:
            return await self.stall_body(request, upload_id)
        
        data = await request.read()
        self.record_upload(request, upload_id, len(data))
        
        if self.block_on_request == index:
            self.blocked.set()
            await self.release.wait()
        
        if self.fail_status is not None:
            return web.Response(status=self.fail_status)
        if self.fail_on_request == index:
            return web.Response(status=500, text="chunk rejected")
        
        if request.query.get('create') == '1' and upload_id in self.completed:
            return web.Response(status=409, text="already exists")
        
        range_header = request.headers.get('Range')
        if range_header is None:
            self.objects[upload_id] = bytearray(data)
        else:
            start = int(range_header[len('bytes='):].split('-')[0])
            if start == 0:
                self.objects[upload_id] = bytearray()
            buffer = self.objects.setdefault(upload_id, bytearray())
            buffer[start:start + len(data)] = data
        
        headers = {}
        if self.send_digest:
            headers['Content-Digest'] = f"sha-256=:{self.encode(self.objects[upload_id])}:"
        return web.Response(status=201, headers=headers)
    
    async def stall_body(self, request: web.Request, upload_id: str) -> web.Response:
        """Read the first bytes of the body, then stop reading until released."""
        head = await request.content.read(1024)
        self.record_upload(request, upload_id, len(head))
        self.blocked.set()
        await self.release.wait()
        return web.Response(status=500)
    
    async def handle_finish(self, request: web.Request) -> web.Response:
        upload_id = request.match_info['upload_id']
        body = await request.read()
        self.finish_requests.append({
            'upload_id': upload_id,
            'method': request.method,
            'body': body,
            'headers': dict(request.headers),
        })
        
        if upload_id not in self.objects:
            return web.json_response({'error': 'not found'}, status=404)
        if self.finish_status >= 400:
            return web.Response(status=self.finish_status)
        
        content = self.objects[upload_id]
        self.completed.add(upload_id)
        
        payload: Dict[str, Any] = {
            'hash': self.hash_override or f"{self.hash_prefix}{self.encode(content)}",
            'length': len(content) if self.length_override is None else self.length_override,
        }
        if self.omit_hash:
            del payload['hash']
        return web.json_response(payload, status=self.finish_status)


@pytest_asyncio.fixture
async def store():
    """Runs a fake remote store on a local port."""
    fake = FakeStore()
    server = test_utils.TestServer(fake.app)
    await server.start_server()
    fake.base_url = f"http://{server.host}:{server.port}"
    yield fake
    fake.release.set()
    await server.close()


@pytest.fixture
def make_file(tmp_path):
    """Factory writing a file of the given content or size."""
    def _make(content=None, size: int = 0, name: str = "payload.bin"):
        if content is None:
            content = os.urandom(size)
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def unthrottled() -> ThrottleConfig:
    """Throttle settings notifying on every tick."""
    return ThrottleConfig(interval=0.0, min_bytes=0)


@pytest.fixture
def make_config(store, unthrottled):
    """Factory building an UploadConfig pointed at the fake store."""
    def _make(**kwargs) -> UploadConfig:
        kwargs.setdefault('throttle', unthrottled)
        return UploadConfig(endpoints=store.endpoints(), **kwargs)
    return _make
