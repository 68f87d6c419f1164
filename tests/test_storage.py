from __future__ import annotations

import asyncio

import yaml

from sceneforge.models import DecomposedScene, Cut
from sceneforge.storage import FileStore, MemoryStore, PersistenceGateway


class BrokenStore:
    async def get(self, key):
        raise OSError("disk unavailable")

    async def set(self, key, value):
        raise OSError("disk full")


def test_gateway_round_trip_stamps_last_modified(gateway, scene_factory, document_factory):
    document = document_factory(scene_factory(1), scene_factory(2, is_image_generated=True))

    saved = asyncio.run(gateway.save(document))
    loaded = asyncio.run(gateway.load())

    assert document.meta.last_modified is None
    assert saved.meta.last_modified is not None
    assert loaded == saved


def test_load_without_stored_project_returns_none(gateway):
    assert asyncio.run(gateway.load()) is None


def test_invalid_stored_data_loads_as_none(store, gateway):
    asyncio.run(store.set("current_project", {"meta": {"title": "x"}, "scenes": "nope"}))
    assert asyncio.run(gateway.load()) is None


def test_store_failures_are_logged_not_raised(scene_factory, document_factory, caplog):
    gateway = PersistenceGateway(BrokenStore())
    document = document_factory(scene_factory(1))

    result = asyncio.run(gateway.save(document))

    assert result is document
    assert asyncio.run(gateway.load()) is None
    assert "Save failed" in caplog.text


def test_decomposed_scene_survives_persistence(gateway, scene_factory, document_factory):
    cuts = [Cut(cut_no=i, narration=f"n{i}", visual_detail=f"d{i}") for i in range(1, 5)]
    scene = scene_factory(1, is_image_generated=True).decompose(cuts, "grid.png")
    asyncio.run(gateway.save(document_factory(scene)))

    loaded = asyncio.run(gateway.load())

    assert isinstance(loaded.scene(1), DecomposedScene)
    assert [c.cut_no for c in loaded.scene(1).cuts] == [1, 2, 3, 4]


def test_memory_store_keys():
    store = MemoryStore()
    asyncio.run(store.set("a", 1))
    asyncio.run(store.set("b", 2))
    assert store.keys() == ["a", "b"]


def test_file_store_writes_yaml_per_key(tmp_path):
    store = FileStore(tmp_path / "store")

    asyncio.run(store.set("quota_2026-01-01", {"count": 3}))
    asyncio.run(store.set("quota_2026-01-01", {"count": 4}))

    path = tmp_path / "store" / "quota_2026-01-01.yaml"
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"count": 4}
    assert asyncio.run(store.get("quota_2026-01-01")) == {"count": 4}
    assert asyncio.run(store.get("missing")) is None
    assert not list((tmp_path / "store").glob("*.tmp"))


def test_file_store_sanitizes_keys(tmp_path):
    store = FileStore(tmp_path)
    asyncio.run(store.set("../escape/key", "value"))

    assert asyncio.run(store.get("../escape/key")) == "value"
    assert [p.parent for p in tmp_path.glob("*.yaml")] == [tmp_path]


def test_gateway_with_file_store_keeps_unicode(tmp_path, scene_factory, document_factory):
    gateway = PersistenceGateway(FileStore(tmp_path), key="current_project")
    document = document_factory(scene_factory(1))
    document.meta.title = "야시장 미스터리"

    asyncio.run(gateway.save(document))

    assert "야시장 미스터리" in (tmp_path / "current_project.yaml").read_text(encoding="utf-8")
    assert asyncio.run(gateway.load()).meta.title == "야시장 미스터리"
