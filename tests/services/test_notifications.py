# tests/services/test_notifications.py
import pytest

from projectdocs.services.notifications import NotificationDispatcher


@pytest.fixture
def dispatcher(notifier):
    return NotificationDispatcher(notifier)


@pytest.fixture
def attachment(db_session, document, admin, create_attachment):
    return create_attachment(admin, container=document, filename="minutes.pdf")


def test_recipient_selection(dispatcher, project, document, admin, create_user):
    wanted = create_user(project=project, permissions=["view_documents"], document_added=True)
    create_user(project=project, permissions=["view_documents"], document_added=False)
    create_user(project=project, permissions=["manage_documents"], document_added=True)
    create_user(document_added=True)

    assert dispatcher.recipients(document, admin) == [wanted]


def test_acting_user_is_excluded(dispatcher, project, document, create_user):
    actor = create_user(project=project, permissions=["view_documents"], document_added=True)
    other = create_user(project=project, permissions=["view_documents"], document_added=True)

    assert dispatcher.recipients(document, actor) == [other]


def test_project_specific_setting_is_used(dispatcher, project, document, admin, create_user):
    muted = create_user(project=project, permissions=["view_documents"], document_added=False,
                        setting_project=project)

    assert muted not in dispatcher.recipients(document, admin)


@pytest.mark.asyncio
async def test_notify_attachments_added(dispatcher, notifier, project, document, attachment, admin, create_user):
    recipient = create_user(project=project, permissions=["view_documents"], document_added=True)

    notified = await dispatcher.notify_attachments_added(document, [attachment], admin)

    assert notified == {recipient.id}
    assert len(notifier.deliveries) == 1
    delivery = notifier.deliveries[0]
    assert delivery.kind == "attachments_added"
    assert delivery.recipient_mail == recipient.mail
    assert delivery.document_title == "Sample Document"
    assert delivery.attachment_filenames == ("minutes.pdf",)
    assert delivery.author_name == admin.name


@pytest.mark.asyncio
async def test_nothing_sent_without_new_attachments(dispatcher, notifier, project, document, admin, create_user):
    create_user(project=project, permissions=["view_documents"], document_added=True)

    notified = await dispatcher.notify_attachments_added(document, [], admin)

    assert notified == set()
    assert notifier.deliveries == []


@pytest.mark.asyncio
async def test_failures_are_isolated_per_recipient(dispatcher, notifier, project, document, attachment, admin,
                                                   create_user):
    first = create_user(project=project, permissions=["view_documents"], document_added=True)
    second = create_user(project=project, permissions=["view_documents"], document_added=True)
    third = create_user(project=project, permissions=["view_documents"], document_added=True)
    notifier.fail_for.add(second.id)

    notified = await dispatcher.notify_attachments_added(document, [attachment], admin)

    assert notified == {first.id, third.id}
    assert notifier.recipients() == [first.id, third.id]


@pytest.mark.asyncio
async def test_notify_document_added(dispatcher, notifier, project, document, admin, create_user):
    recipient = create_user(project=project, permissions=["view_documents"], document_added=True)

    notified = await dispatcher.notify_document_added(document, admin)

    assert notified == {recipient.id}
    assert notifier.deliveries[0].kind == "document_added"


def test_snapshots_are_immutable(dispatcher, project, document, attachment, admin, create_user):
    create_user(project=project, permissions=["view_documents"], document_added=True)

    delivery = dispatcher.prepare_attachments_added(document, [attachment], admin)[0]

    with pytest.raises(AttributeError):
        delivery.recipient_mail = "someone@else.net"
