from fakes import extended_message, image_message, make_message
from whatsapp_snippets.ingestion.classifier import classify
from whatsapp_snippets.memory.store.model import (
    ExtendedText,
    MediaContent,
    MessageContent,
)


def test_conversation_wins_over_everything():
    content = MessageContent(
        conversation="plain",
        extended_text=ExtendedText(text="rich"),
        image=MediaContent(mimetype="image/png"),
    )
    result = classify(make_message("m", content=content))
    assert (result.kind, result.text) == ("text", "plain")
    assert not result.is_media


def test_extended_text_is_text():
    result = classify(extended_message("m", "see https://example.com"))
    assert (result.kind, result.text) == ("text", "see https://example.com")


def test_empty_text_falls_through_to_media():
    content = MessageContent(
        conversation="",
        extended_text=ExtendedText(text=""),
        video=MediaContent(mimetype="video/mp4"),
    )
    assert classify(make_message("m", content=content)).kind == "video"


def test_image_before_video_before_document():
    both = MessageContent(
        image=MediaContent(mimetype="image/jpeg"),
        video=MediaContent(mimetype="video/mp4"),
        document=MediaContent(mimetype="application/pdf"),
    )
    assert classify(make_message("m", content=both)).kind == "image"
    doc = MessageContent(document=MediaContent(mimetype="application/pdf"))
    assert classify(make_message("m", content=doc)).kind == "document"


def test_media_result_carries_metadata():
    result = classify(image_message("m", caption="look"))
    assert result.is_media
    assert result.media.caption == "look"


def test_unsupported_payload_is_unknown():
    sticker = MessageContent(other=("stickerMessage",))
    assert classify(make_message("m", content=sticker)).kind == "unknown"
    assert classify(make_message("m", text=None)).kind == "unknown"
