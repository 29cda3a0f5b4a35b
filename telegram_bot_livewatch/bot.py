import asyncio
import html
import logging
import os
from typing import Optional
from dotenv import load_dotenv
from telegram import Update
from telegram.ext import Application, CommandHandler, MessageHandler, filters, ContextTypes
from apscheduler.schedulers.background import BackgroundScheduler

from livewatch.core.poll_session import PollSession, SessionSnapshot, SessionStatus
from livewatch.services.livewatch_api.client import LiveWatchApiClient

# Configura il logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)

# --- CARICAMENTO VARIABILI D'AMBIENTE ---
current_script_path = os.path.dirname(os.path.abspath(__file__))
project_root_path = os.path.dirname(current_script_path)
dotenv_path = os.path.join(project_root_path, '.env')

if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
    logger.info(f"Variabili d'ambiente caricate da: {dotenv_path}")
else:
    logger.warning(f"File .env non trovato. Assicurati che esista e contenga le chiavi necessarie.")


def read_number_env(name: str, default, cast=int, allow_zero: bool = False):
    """Legge un numero dall'ambiente; se manca o non è valido usa il default con un avviso."""
    raw_value = os.getenv(name, str(default))
    try:
        value = cast(raw_value)
        if value < 0 or (value == 0 and not allow_zero):
            raise ValueError(f"{name} fuori intervallo.")
    except (ValueError, TypeError):
        logger.warning(f"ATTENZIONE: {name} ('{raw_value}') non valido. Uso '{default}'.")
        value = default
    return value


TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
LIVEWATCH_API_BASE_URL = os.getenv("LIVEWATCH_API_BASE_URL", "http://localhost:5000/api")
POLL_INTERVAL_SECONDS = read_number_env("POLL_INTERVAL_SECONDS", 5, int)
PROCESSING_DELAY_SECONDS = read_number_env("PROCESSING_DELAY_SECONDS", 2.0, float, allow_zero=True)
# ---------------------------------------------

# Una sessione di polling per chat, tutte sullo stesso scheduler
_sessions = {}
_scheduler = BackgroundScheduler(timezone="Europe/Rome")


def build_status_message(snapshot: SessionSnapshot) -> Optional[str]:
    """Testo HTML da inviare in chat per uno stato della sessione."""
    info = snapshot.info
    title = html.escape(info.title or 'YouTube Video')
    author = html.escape(info.author or 'Unknown')

    if snapshot.status == SessionStatus.VALIDATING:
        return "🔎 Verifico l'URL di YouTube..."
    if snapshot.status == SessionStatus.LIVE:
        return (f"🔴 <b>{title}</b> di {author} è in diretta.\n"
                f"Ricontrollo ogni {POLL_INTERVAL_SECONDS} secondi, ti avviso quando finisce.")
    if snapshot.status == SessionStatus.PROCESSING:
        return "⚙️ Preparo il link al video..."
    if snapshot.status == SessionStatus.COMPLETED:
        link = html.escape(info.download_url or '')
        return (f"✅ <b>{title}</b> di {author} è pronto!\n"
                f"{link}\n\n"
                "Nota: usa un servizio esterno per scaricare il video da questo link.")
    if snapshot.status == SessionStatus.ERROR:
        return f"⚠️ {html.escape(info.error_message or 'Errore sconosciuto')}"
    # idle: nessun messaggio, il reset lo comunica chi lo richiede
    return None


def _log_send_failure(future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error:
        logger.warning(f"Invio messaggio a Telegram fallito: {error}")


def _make_listener(chat_id: int, application: Application, loop: asyncio.AbstractEventLoop):
    """I cambi di stato arrivano dai thread dello scheduler: li riportiamo nel loop del bot."""
    def on_change(snapshot: SessionSnapshot):
        text = build_status_message(snapshot)
        if not text:
            return
        future = asyncio.run_coroutine_threadsafe(
            application.bot.send_message(chat_id=chat_id, text=text, parse_mode='HTML'), loop
        )
        future.add_done_callback(_log_send_failure)
    return on_change


def get_or_create_session(chat_id: int, application: Application, loop: asyncio.AbstractEventLoop) -> PollSession:
    session = _sessions.get(chat_id)
    if session is None:
        api_client = LiveWatchApiClient(LIVEWATCH_API_BASE_URL)
        session = PollSession.from_api_client(
            api_client,
            scheduler=_scheduler,
            poll_interval_seconds=POLL_INTERVAL_SECONDS,
            processing_delay_seconds=PROCESSING_DELAY_SECONDS,
            on_change=_make_listener(chat_id, application, loop),
            session_id=f"chat{chat_id}",
        )
        _sessions[chat_id] = session
    return session


# Funzione per il comando /start
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_html(
        f"Ciao {user.mention_html()}! 👋\n"
        "Inviami l'URL di una diretta o di un video YouTube: se è in diretta aspetto che finisca "
        "e poi ti mando il link al video.\n"
        "Usa /annulla per fermare il controllo in corso.",
    )
    logger.info(f"Utente {user.first_name} (ID: {user.id}) ha avviato il bot.")


# Funzione per il comando /annulla
async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat_id = update.effective_chat.id
    session = _sessions.pop(chat_id, None)
    if session is None or not session.is_busy:
        await update.message.reply_text("Nessun controllo in corso.")
        return
    # Il listener viene staccato prima del reset: la conferma la mandiamo noi
    session.on_change = None
    session.reset()
    logger.info(f"Chat {chat_id}: sessione annullata dall'utente.")
    await update.message.reply_text("Controllo annullato.")


# Funzione per gestire gli URL
async def handle_url(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat_id = update.effective_chat.id
    url = update.message.text
    logger.info(f"URL ricevuto dalla chat {chat_id}: '{url}'")

    loop = asyncio.get_running_loop()
    session = get_or_create_session(chat_id, context.application, loop)
    try:
        # Il primo controllo è una chiamata HTTP bloccante: fuori dal loop
        await asyncio.to_thread(session.submit, url)
    except Exception as e:
        logger.error(f"Errore imprevisto in handle_url: {e}", exc_info=True)
        await update.message.reply_text("Si è verificato un errore imprevisto. 😟")


def main() -> None:
    logger.info("Avvio del bot...")
    if not TELEGRAM_BOT_TOKEN: logger.error("ERRORE: TELEGRAM_BOT_TOKEN non impostata."); return

    application = Application.builder().token(TELEGRAM_BOT_TOKEN).build()
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("annulla", cancel_command))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_url))

    _scheduler.start()
    logger.info("Bot avviato e in ascolto...")
    try:
        application.run_polling()
    finally:
        for session in list(_sessions.values()):
            session.reset()
        _scheduler.shutdown(wait=False)
        logger.info("Bot terminato.")


if __name__ == '__main__':
    main()
