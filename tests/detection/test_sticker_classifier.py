import pytest

from stickerguard.detection.sticker_classifier import (
    filename_of,
    is_emoticon,
    matches_keyword,
    matches_path_marker,
    matches_sticker_filename,
    matches_sticker_host,
)


@pytest.mark.parametrize(
    "url",
    [
        "https://gchat.qpic.cn/gchatpic_new/0/0-0-ABCDEF/0",
        "https://multimedia.nt.qq.com/download?appid=1407&fileid=xyz",
        "https://cdn.example.com/emoji/pack/12.png",
        "https://cdn.example.com/img/smileyface.png",
        "https://cdn.example.com/img/0123456789abcdef0123456789abcdef.gif",
        "https://cdn.discordapp.com/emojis/112233445566778899.png",
        "https://media.example.com/stickers/12345.png",
        "https://media.example.com/faces/1.png",
    ],
)
def test_sticker_like_urls_are_emoticons(url):
    assert is_emoticon(url) is True


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/photos/vacation.jpg",
        "https://cdn.example.com/uploads/IMG_2041.png",
        "https://cdn.example.com/img/abc123.png",
        "",
    ],
)
def test_ordinary_images_are_not_emoticons(url):
    assert is_emoticon(url) is False


def test_filename_of_lowercases_last_segment():
    assert filename_of("https://x.test/A/B/Photo.PNG") == "photo.png"


def test_hex_digest_filename_is_case_insensitive():
    assert matches_sticker_filename("https://x.test/0123456789ABCDEF0123456789ABCDEF.JPEG")


def test_short_hex_filename_does_not_match():
    assert not matches_sticker_filename("https://x.test/0123456789abcdef.png")


def test_keyword_check_is_case_sensitive_on_full_url():
    assert matches_keyword("https://x.test/sticker.png")
    assert not matches_keyword("https://x.test/STICKERS/a.png")


def test_path_marker_requires_slashes():
    assert matches_path_marker("https://x.test/stickers/a.png")
    assert not matches_path_marker("https://x.test/mystickers.png")


def test_custom_sticker_hosts_replace_defaults():
    url = "https://img.chat.example/abc"
    assert not is_emoticon(url)
    assert matches_sticker_host(url, ["img.chat.example"])
    assert is_emoticon(url, hosts=["img.chat.example"])


def test_empty_hosts_are_ignored():
    assert not matches_sticker_host("https://x.test/a.png", ["", ""])


def test_classification_is_stable():
    url = "https://cdn.discordapp.com/emojis/1.png"
    assert [is_emoticon(url) for _ in range(3)] == [True, True, True]
