"""
Progress reporting, finalize hook and abort
"""
import asyncio
from chunkpy import (
    ChunkedUploaderClient,
    ThrottleConfig,
    UploadAbortedError,
    WireContract,
)

MB = 1024 * 1024


async def register(upload_id):
    print(f"Registering {upload_id} in the catalog")


async def main():
    client = ChunkedUploaderClient.from_endpoints(
        upload="https://store.example/upload/{upload_id}",
        finish="https://store.example/finish/{upload_id}",
        on_finalize=register,
        throttle=ThrottleConfig(interval=0.5, min_bytes=4 * MB),
        # Store answering POST /finish with a hex hash
        wire=WireContract(finish_method='POST', finish_body={}, hash_encoding='hex'),
    )
    
    def on_progress(progress):
        print(f"{progress.state.value}: {progress.percentage:.1f}%")
    
    unsubscribe = client.on_progress(on_progress)
    
    task = asyncio.ensure_future(client.upload("video.mp4", 16 * MB))
    await asyncio.sleep(5)
    client.abort()
    
    try:
        await task
    except UploadAbortedError:
        print(f"Aborted after {client.progress.uploaded:,} bytes")
    finally:
        unsubscribe()


if __name__ == "__main__":
    asyncio.run(main())
