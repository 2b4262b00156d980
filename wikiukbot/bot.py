# wikiukbot/bot.py
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from telegram import (
    Bot,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQueryResultArticle,
    InlineQueryResultsButton,
    InputTextMessageContent,
    LinkPreviewOptions,
    MessageEntity,
    Update,
)
from telegram.error import RetryAfter
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    InlineQueryHandler,
    filters,
)

from wikiukbot import config
from wikiukbot.datatypes import InlineAnswer, InlineResultItem, UpstreamError
from wikiukbot.inline import QueryHandler
from wikiukbot.presentation import utf16_length

logger = logging.getLogger(__name__)

START_TEXT = """🔍 Хочете <b>швидко</b> надіслати співрозмовнику сторінку з <a href="https://uk.wikipedia.org/">Вікіпедії</a>?

💕 Для цього не потрібно виходити з Telegram! Просто введіть у поле повідомлення:
<blockquote><code>@{username} {example}</code></blockquote>
для пошуку сторінки про «Мрію»! Спробуйте, це зручно!

📁 Переглянути початковий код бота: github.com/skrwo/wikiukbot"""

PRIVACY_TEXT = """Цей бот не збирає жодної інформації.
Ваші запити хіба що можуть записуватися до журналів помилок, якщо вони виникатимуть"""


def to_telegram_result(item: InlineResultItem) -> InlineQueryResultArticle:
    """
    Render an item as an article result whose message links the whole share text.
    """
    content = InputTextMessageContent(
        message_text=item.share_text,
        entities=[
            MessageEntity(
                type=MessageEntity.TEXT_LINK,
                offset=0,
                length=utf16_length(item.share_text),
                url=item.share_url,
            )
        ],
    )
    thumb = item.thumbnail
    return InlineQueryResultArticle(
        id=item.id,
        title=item.title,
        input_message_content=content,
        description=item.description,
        thumbnail_url=thumb.url if thumb else None,
        thumbnail_width=thumb.width if thumb else None,
        thumbnail_height=thumb.height if thumb else None,
    )


def to_results_button(answer: InlineAnswer) -> Optional[InlineQueryResultsButton]:
    if answer.hint is None:
        return None
    return InlineQueryResultsButton(
        text=answer.hint.label, start_parameter=answer.hint.start_parameter
    )


async def _log_startup(application: Application) -> None:
    logger.info("Bot is up and running on @%s", application.bot.username)


class InlineBot:
    """
    Telegram front of a QueryHandler: inline queries, /start, /privacy and the error boundary.
    """

    def __init__(self, query_handler: QueryHandler) -> None:
        self.query_handler = query_handler

    async def on_inline_query(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        inline_query = update.inline_query
        if inline_query is None:
            return
        requester = inline_query.from_user
        logger.debug(
            "Inline query %r from %s", inline_query.query, requester.name if requester else None
        )

        # requests is blocking; keep the event loop free for other users
        answer = await asyncio.to_thread(self.query_handler.handle, inline_query.query)
        await inline_query.answer(
            [to_telegram_result(item) for item in answer.items],
            cache_time=answer.cache_time,
            button=to_results_button(answer),
        )

    async def on_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None:
            return
        await message.reply_html(
            START_TEXT.format(username=context.bot.username, example=config.TRY_IT_QUERY),
            link_preview_options=LinkPreviewOptions(is_disabled=True),
            reply_markup=InlineKeyboardMarkup(
                [
                    [
                        InlineKeyboardButton(
                            "Спробувати", switch_inline_query=config.TRY_IT_QUERY
                        )
                    ]
                ]
            ),
        )

    async def on_privacy(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None:
            return
        await message.reply_text(PRIVACY_TEXT)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """
        Log failed updates with the inline query that caused them; never re-raise.
        """
        query = None
        if isinstance(update, Update) and update.inline_query is not None:
            query = update.inline_query.query

        error = context.error
        if isinstance(error, UpstreamError):
            logger.error(
                "Wikipedia error (%s) on query=%r: %s", error.kind.value, query, error.message
            )
        else:
            logger.error("Unexpected error on query=%r", query, exc_info=error)

    def build_application(self, token: str) -> Application:
        application = (
            Application.builder()
            .token(token)
            .concurrent_updates(True)
            .post_init(_log_startup)
            .build()
        )
        private = filters.ChatType.PRIVATE
        application.add_handler(InlineQueryHandler(self.on_inline_query))
        application.add_handler(CommandHandler("start", self.on_start, filters=private))
        application.add_handler(CommandHandler("privacy", self.on_privacy, filters=private))
        application.add_error_handler(self.on_error)
        return application


def _seconds(delay: int | float | timedelta) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


async def register_webhook(
    bot: Bot,
    url: str,
    *,
    secret_token: Optional[str] = None,
    drop_pending_updates: bool = False,
) -> None:
    """
    Point Telegram at url, waiting out flood control as often as Telegram asks.
    """
    while True:
        try:
            await bot.set_webhook(
                url,
                secret_token=secret_token,
                drop_pending_updates=drop_pending_updates,
            )
            return
        except RetryAfter as exc:
            delay = _seconds(exc.retry_after)
            logger.warning("Flood control on setWebhook, retrying in %.0fs", delay)
            await asyncio.sleep(delay)
