import itertools

import pytest

from chatmd.render.masking import mask_code_segments, unmask_code_segments


@pytest.mark.parametrize(
    "src",
    [
        "",
        "plain prose with no code",
        "one `inline` span",
        "`a` and `b` and `c`",
        "```python\nprint('$5')\n```",
        "intro\n~~~\nx^2 = 4\n~~~\noutro `y`",
        "```\n```",
        "unterminated `span and\n```\nunterminated fence",
        "```\nfirst\n```\n```\nsecond\n```",
    ],
)
def test_mask_then_unmask_is_identity(src):
    masked, masks = mask_code_segments(src)
    assert unmask_code_segments(masked, masks) == src


def test_fenced_block_is_one_token_with_newlines_outside():
    src = "before\n```py\nx = 1\n```\nafter"
    masked, masks = mask_code_segments(src)
    assert masked == "before\n__FENCED_CODE_0__\nafter"
    assert masks == {"__FENCED_CODE_0__": "```py\nx = 1\n```"}


def test_inline_code_inside_fence_is_not_masked_separately():
    src = "```\nuse `x` here\n```"
    masked, masks = mask_code_segments(src)
    assert masked == "__FENCED_CODE_0__"
    assert len(masks) == 1


def test_each_inline_span_gets_its_own_token():
    masked, masks = mask_code_segments("Use `a` and `b`")
    assert masked == "Use __INLINE_CODE_0__ and __INLINE_CODE_1__"
    assert masks["__INLINE_CODE_1__"] == "`b`"


def test_mismatched_fence_characters_are_left_alone():
    src = "```\ncode\n~~~"
    masked, masks = mask_code_segments(src)
    assert masked == src
    assert masks == {}


def test_empty_fences_pair_up_in_order():
    src = "```\n```\ntext\n```\nmore\n```"
    masked, masks = mask_code_segments(src)
    assert masked == "__FENCED_CODE_0__\ntext\n__FENCED_CODE_1__"


def test_unterminated_inline_span_is_plain_text():
    masked, masks = mask_code_segments("a `b")
    assert masked == "a `b"
    assert masks == {}


def test_tokens_follow_the_supplied_counter():
    masked, _ = mask_code_segments("`a`", itertools.count(5))
    assert masked == "__INLINE_CODE_5__"
