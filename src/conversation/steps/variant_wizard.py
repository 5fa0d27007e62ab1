"""Variant sub-wizard — color, price, stock, then a media loop.

Runs nested inside ``variant_prompt``: it only touches
``session.current_variant`` / ``session.variant_step`` until the variant is
finished, then appends it to ``draft.variants``.
"""

from src.bot.keyboards import Button, KeyboardLayout
from src.conversation.coercion import normalize_hex, parse_price, parse_stock, split_media_urls
from src.conversation.messages import describe_value, format_number, variant_menu_result
from src.conversation.steps.base import BaseStep, IncomingMessage, StepResult
from src.schemas.conversation import ChatSession, IntakeStep, VariantStep
from src.schemas.product import VariantDraft, new_variant_id

VARIANT_ORDER: tuple[VariantStep, ...] = (
    VariantStep.COLOR_NAME,
    VariantStep.COLOR_HEX,
    VariantStep.PRICE,
    VariantStep.STOCK,
    VariantStep.MEDIA,
)


def start_variant(session: ChatSession) -> StepResult:
    """Enter the sub-wizard. Only called from ``variant_prompt``."""
    if session.step != IntakeStep.VARIANT_PROMPT:
        raise ValueError(f"variant wizard cannot start from {session.step.value}")
    session = session.evolve(
        current_variant=VariantDraft(),
        variant_step=VariantStep.COLOR_NAME,
    )
    result = VariantWizardStep().get_initial_message(session)
    result.response_text = f"🎨 New variant.\n{result.response_text}"
    return result


def _current_value(step: VariantStep, variant: VariantDraft):
    if step == VariantStep.COLOR_NAME:
        return variant.color.name
    if step == VariantStep.COLOR_HEX:
        return variant.color.hex
    if step == VariantStep.PRICE:
        return variant.price
    return variant.stock


def _apply(step: VariantStep, variant: VariantDraft, text: str) -> VariantDraft:
    if step == VariantStep.COLOR_NAME:
        return variant.evolve(color=variant.color.evolve(name=text))
    if step == VariantStep.COLOR_HEX:
        return variant.evolve(color=variant.color.evolve(hex=normalize_hex(text)))
    if step == VariantStep.PRICE:
        return variant.evolve(price=parse_price(text))
    if step == VariantStep.STOCK:
        return variant.evolve(stock=parse_stock(text))
    raise ValueError(f"no text field for {step.value}")


class VariantWizardStep(BaseStep):
    """Dispatches on ``session.variant_step``."""

    def get_initial_message(self, session: ChatSession) -> StepResult:
        step = session.variant_step
        variant = session.current_variant

        if step == VariantStep.MEDIA:
            has_media = bool(variant.image_count or variant.video_count)
            return StepResult(
                response_text=(
                    "📷 Send photos, videos or media URLs for this variant.\n"
                    f"Images: {variant.image_count} | Videos: {variant.video_count}\n"
                    f"Press {Button.DONE} when finished."
                ),
                session=session,
                keyboard=KeyboardLayout.DONE_CANCEL if has_media else KeyboardLayout.DONE_BACK_CANCEL,
            )

        if step == VariantStep.COLOR_NAME:
            text = "Enter color name:"
        elif step == VariantStep.COLOR_HEX:
            text = "Enter color hex code (e.g. #FFD700):"
        elif step == VariantStep.PRICE:
            base = format_number(session.draft.base_price)
            text = f"Enter variant price ({Button.SKIP} uses the base price {base}):"
        else:
            text = "Enter stock quantity:"

        current = _current_value(step, variant)
        if current not in (None, "") and not (step == VariantStep.STOCK and current == "0"):
            text += f"\n<i>Current: {describe_value(current)}</i>"
        return StepResult(response_text=text, session=session, keyboard=KeyboardLayout.REPLY)

    def process(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        step = session.variant_step
        index = VARIANT_ORDER.index(step)
        text = message.text.strip()

        if step == VariantStep.MEDIA:
            return self._process_media(message, session)

        if text == Button.PREVIOUS:
            if index == 0:
                session = session.evolve(current_variant=None, variant_step=None)
                return variant_menu_result(session, prefix="↩️ Variant discarded.")
            return self._goto(session, index - 1)
        if text in (Button.NEXT, Button.SKIP):
            return self._goto(session, index + 1)
        if not text:
            return self.reject(session)

        variant = _apply(step, session.current_variant, text)
        return self._goto(session.evolve(current_variant=variant), index + 1)

    def _goto(self, session: ChatSession, index: int) -> StepResult:
        return self.get_initial_message(session.evolve(variant_step=VARIANT_ORDER[index]))

    def _process_media(self, message: IncomingMessage, session: ChatSession) -> StepResult:
        text = message.text.strip()
        if text == Button.DONE:
            return self._finish(session)
        if text == Button.BACK:
            return self._goto(session, VARIANT_ORDER.index(VariantStep.STOCK))

        url_images, url_videos = split_media_urls(text)
        images = len(url_images) + len(message.image_file_ids)
        videos = len(url_videos) + len(message.video_file_ids)
        if not images and not videos:
            return self.reject(session)

        variant = session.current_variant
        variant = variant.evolve(
            image_urls=variant.image_urls + tuple(url_images),
            video_urls=variant.video_urls + tuple(url_videos),
            image_file_ids=variant.image_file_ids + tuple(message.image_file_ids),
            video_file_ids=variant.video_file_ids + tuple(message.video_file_ids),
        )
        session = session.evolve(current_variant=variant)
        return StepResult(
            response_text=(
                f"📎 Added {images} image(s) and {videos} video(s).\n"
                f"Images: {variant.image_count} | Videos: {variant.video_count}\n"
                f"Send more or press {Button.DONE}."
            ),
            session=session,
            keyboard=KeyboardLayout.DONE_CANCEL,
        )

    @staticmethod
    def _finish(session: ChatSession) -> StepResult:
        draft = session.draft
        variant = session.current_variant
        price = variant.price if variant.price is not None else parse_price(draft.base_price)
        finished = variant.evolve(
            id=new_variant_id(v.id for v in draft.variants if v.id),
            price=price,
        )
        draft = draft.evolve(variants=draft.variants + (finished,))
        session = session.evolve(draft=draft, current_variant=None, variant_step=None)
        return variant_menu_result(session, prefix=f"✅ Variant #{len(draft.variants)} added.")
