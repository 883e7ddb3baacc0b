"""
Upload a file in chunks
"""
import asyncio
from chunkpy import ChunkedUploaderClient, UploadConflictError

MB = 1024 * 1024


async def main():
    client = ChunkedUploaderClient.from_endpoints(
        upload="https://store.example/upload/{upload_id}",
        finish="https://store.example/finish/{upload_id}",
        headers={'Authorization': 'Bearer <token>'},
    )
    
    async with client:
        
        # Whole file in a single request
        upload_id = await client.upload("document.pdf")
        print(f"Uploaded: {upload_id}")
        
        # 8 MB chunks, sent one after the other
        result = await client.upload_with_result("backup.tar", 8 * MB)
        print(f"Uploaded {result.file_size:,} bytes in {result.chunks} chunks")
        
        # Same content again: refused unless overwrite is allowed
        try:
            await client.upload("backup.tar", 8 * MB)
        except UploadConflictError:
            await client.upload("backup.tar", 8 * MB, overwrite=True)


if __name__ == "__main__":
    asyncio.run(main())
