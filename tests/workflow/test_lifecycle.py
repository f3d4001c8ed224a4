"""Tests for lifecycle hooks and end-to-end approval scenarios."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from catalog_cms.domain.entities import ResourceKind
from catalog_cms.infrastructure.sync_client import SyncResponse
from catalog_cms.workflow.pipeline import WriteOrigin


async def tasks_for(store, entity_type):
    """List approval tasks of one entity type, oldest first."""
    tasks = await store.list_all(ResourceKind.APPROVAL_TASK)
    return [t for t in tasks if t.entity_type == entity_type]


async def approve(service, task_id):
    return await service.update(
        ResourceKind.APPROVAL_TASK, task_id, {"workflow_status": "approved"}
    )


class TestCatalogEntityLifecycle:
    """Tests for category/collection write interception."""

    @pytest.mark.asyncio
    async def test_create_forces_review(self, service):
        """Test a user cannot create an entity already approved."""
        category = await service.create(
            ResourceKind.CATEGORY,
            {
                "name": "Shoes",
                "slug": "shoes",
                "workflow_status": "approved",
                "sync_status": "synced",
                "sync_error": "stale",
            },
        )

        assert category.workflow_status == "ready_for_review"
        assert category.sync_status == "not_synced"
        assert category.sync_error is None

    @pytest.mark.asyncio
    async def test_create_opens_task(self, service, store):
        """Test every creation opens exactly one task."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})

        tasks = await tasks_for(store, "category")
        assert len(tasks) == 1
        assert tasks[0].entity_id == str(category.id)
        assert tasks[0].state_before is None

    @pytest.mark.asyncio
    async def test_noop_update_opens_no_task(self, service, store):
        """Test re-saving unchanged values does not open a task."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})

        await service.update(ResourceKind.CATEGORY, category.id, {"name": "Shoes"})

        assert len(await tasks_for(store, "category")) == 1

    @pytest.mark.asyncio
    async def test_edit_demotes_approved_entity(self, service, engine, store):
        """Test a user edit of an approved entity sends it back to review."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        await engine.pipeline.update(
            ResourceKind.CATEGORY,
            category.id,
            {"workflow_status": "approved", "sync_status": "synced"},
            origin=WriteOrigin.SYSTEM,
        )

        updated = await service.update(
            ResourceKind.CATEGORY, category.id, {"description": "All shoes"}
        )

        assert updated.workflow_status == "ready_for_review"
        assert updated.sync_status == "not_synced"
        tasks = await tasks_for(store, "category")
        assert len(tasks) == 2
        assert tasks[-1].title == "Update request: Shoes"
        assert tasks[-1].diff == {
            "description": {"from": None, "to": "All shoes"},
            "workflow_status": {"from": "approved", "to": "ready_for_review"},
        }

    @pytest.mark.asyncio
    async def test_system_writes_open_no_task(self, service, engine, store):
        """Test workflow-internal writes never open tasks."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})

        result = await engine.pipeline.update(
            ResourceKind.CATEGORY,
            category.id,
            {"workflow_status": "approved", "sync_status": "error", "sync_error": "boom"},
            origin=WriteOrigin.SYSTEM,
        )

        assert result.workflow_status == "approved"
        assert result.sync_error == "boom"
        assert len(await tasks_for(store, "category")) == 1

    @pytest.mark.asyncio
    async def test_task_failure_does_not_fail_write(self, service, engine, store):
        """Test approval task errors are logged and swallowed."""
        engine.factory.create = AsyncMock(side_effect=RuntimeError("boom"))

        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})

        assert category.id is not None
        assert await store.get(ResourceKind.CATEGORY, category.id) is not None

    @pytest.mark.asyncio
    async def test_update_of_missing_entity(self, engine):
        """Test updating a missing entity returns None."""
        assert await engine.pipeline.update(ResourceKind.CATEGORY, 404, {"name": "x"}) is None


class TestApprovalTaskLifecycle:
    """Tests for decision handling."""

    @pytest.mark.asyncio
    async def test_manual_task_defaults(self, service):
        """Test tasks created without status or priority get defaults."""
        task = await service.create(
            ResourceKind.APPROVAL_TASK,
            {"title": "Check", "entity_type": "category", "entity_id": "1", "priority": ""},
        )

        assert task.workflow_status == "pending"
        assert task.priority == "medium"
        assert task.decision_at is None

    @pytest.mark.asyncio
    async def test_decision_stamps_timestamp(self, service, store):
        """Test approving or rejecting stamps decision_at."""
        await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]

        rejected = await service.update(
            ResourceKind.APPROVAL_TASK, task.id, {"workflow_status": "rejected"}
        )

        assert rejected.decision_at is not None

    @pytest.mark.asyncio
    async def test_explicit_decision_time_kept(self, service, store):
        """Test a supplied decision_at is not overwritten."""
        await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]
        decided = datetime(2026, 2, 2, tzinfo=timezone.utc)

        updated = await service.update(
            ResourceKind.APPROVAL_TASK,
            task.id,
            {"workflow_status": "rejected", "decision_at": decided},
        )

        assert updated.decision_at == decided

    @pytest.mark.asyncio
    async def test_rejection_does_not_approve(self, service, store, sync_client):
        """Test rejecting leaves the entity in review."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]

        await service.update(ResourceKind.APPROVAL_TASK, task.id, {"workflow_status": "rejected"})

        refreshed = await store.get(ResourceKind.CATEGORY, category.id)
        assert refreshed.workflow_status == "ready_for_review"
        sync_client.sync_categories.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_approval_edge_fires_once(self, service, store, sync_client):
        """Test re-saving an approved task does not approve again."""
        await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]

        await approve(service, task.id)
        await service.update(ResourceKind.APPROVAL_TASK, task.id, {"notes": "looks good"})
        await approve(service, task.id)

        assert sync_client.sync_categories.await_count == 1

    @pytest.mark.asyncio
    async def test_callback_failure_does_not_fail_decision(self, service, store, sync_client):
        """Test sync errors raised during approval are swallowed."""
        sync_client.sync_categories.side_effect = RuntimeError("network down")
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]

        approved = await approve(service, task.id)

        assert approved.workflow_status == "approved"
        refreshed = await store.get(ResourceKind.CATEGORY, category.id)
        assert refreshed.workflow_status == "approved"
        assert refreshed.sync_status == "pending"


class TestScenarios:
    """End-to-end approval and sync scenarios."""

    @pytest.mark.asyncio
    async def test_create_approve_sync_category(self, service, store, sync_client):
        """Test create Shoes -> task -> approve -> synced."""
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})

        tasks = await tasks_for(store, "category")
        assert len(tasks) == 1
        assert tasks[0].diff["name"] == {"from": None, "to": "Shoes"}
        assert tasks[0].workflow_status == "pending"

        await approve(service, tasks[0].id)

        refreshed = await store.get(ResourceKind.CATEGORY, category.id)
        assert refreshed.workflow_status == "approved"
        assert refreshed.sync_status == "synced"
        assert refreshed.sync_error is None
        sync_client.sync_categories.assert_awaited_once_with(
            [
                {
                    "name": "Shoes",
                    "slug": "shoes",
                    "description": "",
                    "rank": 0,
                    "is_active": True,
                    "is_internal": False,
                    "strapi_id": category.id,
                    "strapi_slug": "shoes",
                    "value_per_points": [],
                }
            ]
        )
        # Approval writes are system writes
        assert len(await tasks_for(store, "category")) == 1

    @pytest.mark.asyncio
    async def test_sync_failure_recorded(self, service, store, sync_client):
        """Test a rejected push leaves the entity approved with an error."""
        sync_client.sync_categories.return_value = SyncResponse(
            ok=False, status=500, error="Internal Server Error"
        )
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        task = (await tasks_for(store, "category"))[0]

        await approve(service, task.id)

        refreshed = await store.get(ResourceKind.CATEGORY, category.id)
        assert refreshed.workflow_status == "approved"
        assert refreshed.sync_status == "error"
        assert refreshed.sync_error == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_collection_category_swap(self, service, store):
        """Test collection [A, B] -> [A, D] diffs only the category set."""
        a = await service.create(ResourceKind.CATEGORY, {"name": "A", "slug": "a"})
        b = await service.create(ResourceKind.CATEGORY, {"name": "B", "slug": "b"})
        d = await service.create(ResourceKind.CATEGORY, {"name": "D", "slug": "d"})
        collection = await service.create(
            ResourceKind.COLLECTION,
            {"name": "Summer", "slug": "summer", "categories": [a.id, b.id]},
        )

        await service.update(
            ResourceKind.COLLECTION, collection.id, {"categories": [a.id, d.id]}
        )

        tasks = await tasks_for(store, "collection")
        assert len(tasks) == 2
        assert tasks[-1].diff == {
            "categories": {
                "added": [{"id": d.id, "name": "D", "slug": "d"}],
                "removed": [{"id": b.id, "name": "B", "slug": "b"}],
            }
        }

    @pytest.mark.asyncio
    async def test_collection_approval_syncs_collection(self, service, store, sync_client):
        """Test approving a collection task pushes the collection."""
        collection = await service.create(
            ResourceKind.COLLECTION,
            {"name": "Summer", "slug": "summer", "sort_rank": 2, "visibility": "private"},
        )
        task = (await tasks_for(store, "collection"))[0]

        await approve(service, task.id)

        sync_client.sync_collections.assert_awaited_once_with(
            [
                {
                    "title": "Summer",
                    "slug": "summer",
                    "order": 2,
                    "visibility": "private",
                    "strapi_id": collection.id,
                    "strapi_slug": "summer",
                    "value_per_points": [],
                }
            ]
        )
        sync_client.sync_categories.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_currency_codes_collapse(self, service, store):
        """Test "inr"/"INR" overrides for one channel snapshot as one INR entry."""
        lower = await service.create(ResourceKind.CURRENCY, {"code": "inr"})
        upper = await service.create(ResourceKind.CURRENCY, {"code": "INR"})
        channel = await service.create(ResourceKind.SALES_CHANNEL, {"name": "Web"})

        await service.create(
            ResourceKind.CATEGORY,
            {
                "name": "Shoes",
                "slug": "shoes",
                "value_per_points": [
                    {"currency": lower.id, "sales_channel": channel.id, "vpp": 1},
                    {"currency": upper.id, "sales_channel": channel.id, "vpp": "2.5"},
                ],
            },
        )

        task = (await tasks_for(store, "category"))[0]
        overrides = task.state_after["value_per_points"]
        assert len(overrides) == 1
        assert overrides[0]["currency_code"] == "INR"
        assert overrides[0]["currency_id"] == upper.id
        assert overrides[0]["value"] == 2.5

    @pytest.mark.asyncio
    async def test_stale_approval_syncs_live_state(self, service, store, sync_client):
        """Test approving an older task pushes the entity's current state.

        The task snapshot says "Shoes" but the entity was renamed after
        the task was opened; approval syncs what is live now.
        """
        category = await service.create(ResourceKind.CATEGORY, {"name": "Shoes", "slug": "shoes"})
        first_task = (await tasks_for(store, "category"))[0]
        await service.update(ResourceKind.CATEGORY, category.id, {"name": "Sneakers"})

        await approve(service, first_task.id)

        assert first_task.state_after["name"] == "Shoes"
        items = sync_client.sync_categories.await_args.args[0]
        assert items[0]["name"] == "Sneakers"
        refreshed = await store.get(ResourceKind.CATEGORY, category.id)
        assert refreshed.workflow_status == "approved"
        assert refreshed.name == "Sneakers"
