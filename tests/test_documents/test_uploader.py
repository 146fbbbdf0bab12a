"""Tests for the Uploader surface."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from rentaldesk.documents.registry import LocalReferences
from rentaldesk.documents.uploader import Uploader
from rentaldesk.exceptions import APIError, ValidationError
from rentaldesk.models.attachment import LocalFile
from rentaldesk.models.document import Document

ORIGIN = 'http://localhost:5000'


@pytest.fixture
def documents():
    return [Document(name='a.pdf', type='application/pdf', size=1, url='/srv/uploads/a.pdf')]


@pytest.fixture
def scan():
    return LocalFile(path='/home/agent/scan.png', name='scan.png', mime_type='image/png', size=3)


@pytest.fixture
def notifier():
    return MagicMock()


class TestUploaderAdd:
    """Tests for adding files."""

    def test_add_appends_and_notifies(self, documents, scan):
        callback = MagicMock()
        uploader = Uploader(documents, ORIGIN, on_new_files_change=callback)

        uploader.add([scan])

        assert [item.name for item in uploader.items()] == ['a.pdf', 'scan.png']
        callback.assert_called_once_with([scan])

    def test_add_same_file_twice_keeps_one(self, scan):
        uploader = Uploader([], ORIGIN)

        uploader.add([scan])
        uploader.add([scan])

        assert uploader.new_files == [scan]

    def test_single_mode_replaces_new_file(self, documents, scan):
        other = LocalFile(path='/home/agent/other.pdf', name='other.pdf')
        uploader = Uploader(documents, ORIGIN, multiple=False)

        uploader.add([scan])
        uploader.add([other, scan])

        assert uploader.new_files == [other]
        assert [item.name for item in uploader.items()] == ['other.pdf']

    def test_read_only_refuses_add(self, scan):
        uploader = Uploader([], ORIGIN, read_only=True)

        assert not uploader.can_add
        assert not uploader.can_remove
        with pytest.raises(ValidationError):
            uploader.add([scan])


class TestUploaderRemove:
    """Tests for removing files."""

    @pytest.mark.asyncio
    async def test_remove_new_file_makes_no_remote_call(self, documents, scan):
        remover = AsyncMock()
        callback = MagicMock()
        references = LocalReferences()
        uploader = Uploader(documents, ORIGIN, on_new_files_change=callback, remove_existing=remover,
                            references=references)
        uploader.add([scan])
        attachment = uploader.items()[-1]

        assert await uploader.remove(attachment)

        remover.assert_not_called()
        assert uploader.new_files == []
        assert callback.call_args.args == ([],)
        assert attachment.location not in references

    @pytest.mark.asyncio
    async def test_remove_existing_calls_remover(self, documents):
        remover = AsyncMock()
        uploader = Uploader(documents, ORIGIN, remove_existing=remover)
        attachment = uploader.items()[0]

        assert await uploader.remove(attachment)

        remover.assert_awaited_once_with(attachment)
        assert uploader.items() == []
        assert uploader.state.existing == ()

    @pytest.mark.asyncio
    async def test_failed_removal_restores_and_notifies(self, documents, notifier):
        remover = AsyncMock(side_effect=APIError('HTTP 500: boom', status_code=500))
        uploader = Uploader(documents, ORIGIN, remove_existing=remover, notifier=notifier)
        attachment = uploader.items()[0]

        assert not await uploader.remove(attachment)

        assert [item.name for item in uploader.items()] == ['a.pdf']
        notifier.error.assert_called_once_with('Failed to remove document a.pdf.')

    @pytest.mark.asyncio
    async def test_remove_without_remover_is_staged(self, documents):
        uploader = Uploader(documents, ORIGIN)
        attachment = uploader.items()[0]

        assert await uploader.remove(attachment)

        assert uploader.items() == []
        assert uploader.state.pending == documents


class TestUploaderLifecycle:
    """Tests for preview, reset and close."""

    def test_preview_uses_server_origin(self, documents):
        uploader = Uploader(documents, ORIGIN)

        preview = uploader.preview(uploader.items()[0])

        assert preview.url == 'http://localhost:5000/uploads/a.pdf'

    def test_close_releases_own_references_only(self, scan):
        references = LocalReferences()
        other = LocalFile(path='/home/agent/other.pdf', name='other.pdf')
        references.acquire(other)
        uploader = Uploader([], ORIGIN, references=references)
        uploader.add([scan])
        uploader.items()

        uploader.close()

        assert len(references) == 1

    def test_reset_replaces_documents(self, documents, scan):
        uploader = Uploader([], ORIGIN)
        uploader.add([scan])

        uploader.reset(documents)

        assert uploader.new_files == []
        assert [item.name for item in uploader.items()] == ['a.pdf']
