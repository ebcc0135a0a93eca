from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from reservation_node.config import Settings
from reservation_node.main import create_app
from reservation_node.node import ReservationNode


@pytest.mark.asyncio
async def test_lifespan_builds_seeded_node(tmp_path: Path) -> None:
    settings = Settings(
        city="MTL",
        peer_host="127.0.0.1",
        peer_ports={"MTL": 0, "TOR": 1, "VAN": 2},
        peer_timeout=0.1,
        peer_retries=0,
        audit_log_dir=str(tmp_path),
    )
    app = create_app(settings)

    async with app.router.lifespan_context(app):
        node = app.state.node
        assert isinstance(node, ReservationNode)
        assert node.repo.find("MTLM010122") is not None

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}

    assert (tmp_path / "MTL-log").exists()
