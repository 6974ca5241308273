"""Integration tests for the attachments API."""

from pathlib import Path

import pytest
from httpx import AsyncClient

from tipbase.config import settings
from tipbase.modules.tips.models import Tip


def png(name: str = "jam.png", size: int = 16) -> tuple[str, tuple[str, bytes, str]]:
    return ("attachments", (name, b"\x89PNG" + b"\x00" * size, "image/png"))


class TestUpload:
    """Tests for POST /api/tips/{id}/attachments."""

    @pytest.mark.asyncio
    async def test_upload_batch(self, client: AsyncClient, tip: Tip, upload_dir: Path):
        files = [
            png("one.png"),
            ("attachments", ("notes.txt", b"hello", "text/plain")),
            ("attachments", ("manual.pdf", b"%PDF-1.4", "application/pdf")),
        ]

        response = await client.post(
            f"/api/tips/{tip.id}/attachments", files=files, data={"author_name": "Alice"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Successfully uploaded 3 file(s)"
        assert [a["original_name"] for a in data["attachments"]] == [
            "one.png",
            "notes.txt",
            "manual.pdf",
        ]
        assert all(a["uploaded_by"] == "Alice" for a in data["attachments"])
        for attachment in data["attachments"]:
            assert (upload_dir / attachment["filename"]).exists()

    @pytest.mark.asyncio
    async def test_each_attachment_audited(self, client: AsyncClient, tip: Tip):
        """Verify K files in one upload yield K audit events."""
        files = [png(f"shot{i}.png") for i in range(3)]

        response = await client.post(f"/api/tips/{tip.id}/attachments", files=files)
        ids = [a["id"] for a in response.json()["attachments"]]

        logs = (await client.get("/api/audit-logs")).json()["logs"]
        events = [log for log in logs if log["entity_type"] == "attachment"]
        assert sorted(log["entity_id"] for log in events) == sorted(ids)
        assert {log["new_data"]["_displayTitle"] for log in events} == {
            "shot0.png",
            "shot1.png",
            "shot2.png",
        }

    @pytest.mark.asyncio
    async def test_unknown_tip(self, client: AsyncClient):
        response = await client.post("/api/tips/999/attachments", files=[png()])

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_disallowed_type(self, client: AsyncClient, tip: Tip, upload_dir: Path):
        files = [png(), ("attachments", ("run.exe", b"MZ", "application/octet-stream"))]

        response = await client.post(f"/api/tips/{tip.id}/attachments", files=files)

        assert response.status_code == 400
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_extension_must_match_allow_list(self, client: AsyncClient, tip: Tip):
        files = [("attachments", ("image.bmp", b"BM", "image/png"))]

        response = await client.post(f"/api/tips/{tip.id}/attachments", files=files)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_too_many_files(self, client: AsyncClient, tip: Tip):
        files = [png(f"{i}.png") for i in range(6)]

        response = await client.post(f"/api/tips/{tip.id}/attachments", files=files)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_file_too_large(self, client: AsyncClient, tip: Tip, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size", 10)

        response = await client.post(f"/api/tips/{tip.id}/attachments", files=[png(size=64)])

        assert response.status_code == 400
        assert (await client.get("/api/audit-logs")).json()["logs"] == []


class TestListAndDelete:
    """Tests for listing and deleting attachments."""

    @pytest.mark.asyncio
    async def test_list_newest_first(self, client: AsyncClient, tip: Tip):
        await client.post(f"/api/tips/{tip.id}/attachments", files=[png("old.png")])
        await client.post(f"/api/tips/{tip.id}/attachments", files=[png("new.png")])

        response = await client.get(f"/api/tips/{tip.id}/attachments")

        assert [a["original_name"] for a in response.json()] == ["new.png", "old.png"]

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_file(
        self, client: AsyncClient, tip: Tip, upload_dir: Path
    ):
        upload = await client.post(f"/api/tips/{tip.id}/attachments", files=[png()])
        attachment = upload.json()["attachments"][0]

        response = await client.delete(f"/api/attachments/{attachment['id']}")

        assert response.status_code == 200
        assert not (upload_dir / attachment["filename"]).exists()
        assert (await client.get(f"/api/tips/{tip.id}/attachments")).json() == []

        history = await client.get(f"/api/audit-logs/attachment/{attachment['id']}")
        delete_log = history.json()["logs"][0]
        assert delete_log["action"] == "DELETE"
        assert delete_log["old_data"] == {"_displayTitle": f"Attachment #{attachment['id']}"}

    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient):
        response = await client.delete("/api/attachments/999")

        assert response.status_code == 404
