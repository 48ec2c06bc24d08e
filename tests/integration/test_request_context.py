"""Integration tests for request-id propagation."""

import pytest


class TestRequestId:
    @pytest.mark.asyncio
    async def test_incoming_id_is_echoed(self, app_client):
        client, _ = app_client
        resp = await client.get("/workflow/stages", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_id_generated_when_absent(self, app_client):
        client, _ = app_client
        resp = await client.get("/health")
        assert len(resp.headers["X-Request-ID"]) == 32
