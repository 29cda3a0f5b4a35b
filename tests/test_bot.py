import asyncio
import pytest
from unittest.mock import MagicMock, AsyncMock

from livewatch.api.models.video import VideoStatus
from livewatch.core.poll_session import SessionSnapshot, SessionStatus, VideoInfo
from telegram_bot_livewatch import bot


def snapshot(status, **info):
    return SessionSnapshot(session_id='chat1', status=status, video_id='abc123', info=VideoInfo(**info))


def test_completed_message_contains_link_and_escaped_title():
    text = bot.build_status_message(snapshot(
        SessionStatus.COMPLETED,
        title='Q&A <live>',
        author='Canale',
        download_url='https://www.youtube.com/watch?v=abc123',
    ))
    assert 'https://www.youtube.com/watch?v=abc123' in text
    assert 'Q&amp;A &lt;live&gt;' in text


def test_live_message_mentions_poll_interval():
    text = bot.build_status_message(snapshot(SessionStatus.LIVE, title='Diretta', author='Canale'))
    assert f"{bot.POLL_INTERVAL_SECONDS} secondi" in text


def test_error_message_shows_reason():
    text = bot.build_status_message(snapshot(SessionStatus.ERROR, error_message='Invalid YouTube URL. Please check and try again.'))
    assert 'Invalid YouTube URL' in text


def test_idle_produces_no_message():
    assert bot.build_status_message(snapshot(SessionStatus.IDLE)) is None


def test_cancel_without_session_replies(monkeypatch):
    monkeypatch.setattr(bot, '_sessions', {})
    update = MagicMock()
    update.effective_chat.id = 99
    update.message.reply_text = AsyncMock()

    asyncio.run(bot.cancel_command(update, MagicMock()))

    update.message.reply_text.assert_awaited_once_with("Nessun controllo in corso.")


def test_cancel_resets_busy_session(monkeypatch):
    session = MagicMock(is_busy=True)
    monkeypatch.setattr(bot, '_sessions', {99: session})
    update = MagicMock()
    update.effective_chat.id = 99
    update.message.reply_text = AsyncMock()

    asyncio.run(bot.cancel_command(update, MagicMock()))

    session.reset.assert_called_once()
    assert session.on_change is None
    assert 99 not in bot._sessions
    update.message.reply_text.assert_awaited_once_with("Controllo annullato.")


def test_handle_url_creates_one_session_and_forwards_updates(monkeypatch):
    # 1. ARRANGE
    scheduler = MagicMock()
    monkeypatch.setattr(bot, '_scheduler', scheduler)
    monkeypatch.setattr(bot, '_sessions', {})
    api_client = MagicMock()
    api_client.check_video.return_value = VideoStatus(valid=True, title='T', author='A', is_live=False)
    client_factory = MagicMock(return_value=api_client)
    monkeypatch.setattr(bot, 'LiveWatchApiClient', client_factory)

    context = MagicMock()
    context.application.bot.send_message = AsyncMock()
    update = MagicMock()
    update.effective_chat.id = 42
    update.message.text = 'https://youtu.be/abc123'
    update.message.reply_text = AsyncMock()

    async def run():
        await bot.handle_url(update, context)
        await bot.handle_url(update, context)
        # lascia al loop il tempo di eseguire gli invii pianificati dai thread
        for _ in range(5):
            await asyncio.sleep(0)

    # 2. ACT
    asyncio.run(run())

    # 3. ASSERT
    client_factory.assert_called_once_with(bot.LIVEWATCH_API_BASE_URL)
    assert list(bot._sessions) == [42]
    assert api_client.check_video.call_count == 2
    api_client.check_video.assert_called_with('abc123')

    sent = context.application.bot.send_message.call_args_list
    texts = [c.kwargs['text'] for c in sent]
    # Il reset della seconda richiesta (idle) non produce messaggi
    assert texts == [
        "🔎 Verifico l'URL di YouTube...",
        "⚙️ Preparo il link al video...",
    ] * 2
    assert all(c.kwargs['chat_id'] == 42 for c in sent)
    assert all(c.kwargs['parse_mode'] == 'HTML' for c in sent)
    assert context.application.bot.send_message.await_count == 4

    date_jobs = [c.kwargs for c in scheduler.add_job.call_args_list if c.kwargs.get('trigger') == 'date']
    assert len(date_jobs) == 2
    assert date_jobs[-1]['id'] == 'livewatch-processing-chat42-3'
    update.message.reply_text.assert_not_awaited()


def test_listener_sends_completed_message_from_scheduler_thread():
    application = MagicMock()
    application.bot.send_message = AsyncMock()

    async def run():
        listener = bot._make_listener(7, application, asyncio.get_running_loop())
        await asyncio.to_thread(listener, snapshot(SessionStatus.COMPLETED, title='T', author='A',
                                                   download_url='https://www.youtube.com/watch?v=abc123'))
        await asyncio.to_thread(listener, snapshot(SessionStatus.IDLE))
        for _ in range(5):
            await asyncio.sleep(0)

    asyncio.run(run())

    application.bot.send_message.assert_awaited_once()
    kwargs = application.bot.send_message.call_args.kwargs
    assert kwargs['chat_id'] == 7
    assert kwargs['parse_mode'] == 'HTML'
    assert 'https://www.youtube.com/watch?v=abc123' in kwargs['text']


@pytest.mark.parametrize("raw_value", ['abc', '0', '-3'])
def test_invalid_poll_interval_env_falls_back_to_default(monkeypatch, raw_value):
    monkeypatch.setenv('POLL_INTERVAL_SECONDS', raw_value)
    assert bot.read_number_env('POLL_INTERVAL_SECONDS', 5, int) == 5


def test_processing_delay_env_accepts_zero_and_rejects_garbage(monkeypatch):
    monkeypatch.setenv('PROCESSING_DELAY_SECONDS', '0')
    assert bot.read_number_env('PROCESSING_DELAY_SECONDS', 2.0, float, allow_zero=True) == 0.0
    monkeypatch.setenv('PROCESSING_DELAY_SECONDS', 'due')
    assert bot.read_number_env('PROCESSING_DELAY_SECONDS', 2.0, float, allow_zero=True) == 2.0


def test_valid_env_value_is_used(monkeypatch):
    monkeypatch.setenv('POLL_INTERVAL_SECONDS', '9')
    assert bot.read_number_env('POLL_INTERVAL_SECONDS', 5, int) == 9
