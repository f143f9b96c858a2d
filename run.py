#!/usr/bin/env python3
"""Startup script for container deployment."""
import os
import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    print(f"Starting Storefront API on port {port}")
    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
