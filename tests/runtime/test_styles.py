import unittest

from osrs_icons.runtime.styles import (
    ANIM_ID_ATTRIBUTE,
    CURSOR_ID_ATTRIBUTE,
    ElementTarget,
    StyleDocument,
    animate_cursor,
    apply_cursors,
)

WHIP = "url('data:image/png;base64,AAA'), auto"
COINS = "url('data:image/png;base64,BBB'), auto"


def make_document() -> StyleDocument:
    return StyleDocument(clock=lambda: 1.0)


class StyleDocumentTests(unittest.TestCase):
    def test_ids_are_unique_and_time_tagged(self):
        document = make_document()
        self.assertEqual(document.next_id("osrs"), "osrs-1-rs")
        self.assertEqual(document.next_id("osrs"), "osrs-2-rs")

    def test_render_marks_style_blocks(self):
        document = make_document()
        document.append_style("* { cursor: auto; }", "data-osrs-cursors")
        self.assertEqual(document.render(), '<style data-osrs-cursors="true">\n* { cursor: auto; }\n</style>')


class ApplyCursorsTests(unittest.TestCase):
    def test_global_rules_replace_auto_fallback_with_state(self):
        document = make_document()
        apply_cursors({"default": WHIP, "pointer": COINS}, document=document)

        (marker, css), = document.styles.values()
        self.assertEqual(marker, "data-osrs-cursors")
        self.assertEqual(
            css.splitlines(),
            [
                "* { cursor: url('data:image/png;base64,AAA'), auto; }",
                "* { cursor: url('data:image/png;base64,BBB'), pointer; }",
            ],
        )

    def test_scoped_rules_tag_target_and_revert(self):
        document = make_document()
        target = ElementTarget()

        revert = apply_cursors({"wait": WHIP}, target=target, document=document)

        scope_id = target.attributes[CURSOR_ID_ATTRIBUTE]
        (_, css), = document.styles.values()
        self.assertEqual(css, f'[{CURSOR_ID_ATTRIBUTE}="{scope_id}"] {{ cursor: url(\'data:image/png;base64,AAA\'), wait; }}')

        revert()
        self.assertEqual(document.styles, {})
        self.assertNotIn(CURSOR_ID_ATTRIBUTE, target.attributes)

    def test_unknown_state_raises(self):
        with self.assertRaises(ValueError):
            apply_cursors({"hover": WHIP}, document=make_document())

    def test_without_document_is_a_no_op(self):
        revert = apply_cursors({"default": WHIP})
        self.assertIsNone(revert())

    def test_each_call_gets_its_own_scope(self):
        document = make_document()
        first, second = ElementTarget(), ElementTarget()
        apply_cursors({"default": WHIP}, target=first, document=document)
        apply_cursors({"default": COINS}, target=second, document=document)

        self.assertNotEqual(first.attributes[CURSOR_ID_ATTRIBUTE], second.attributes[CURSOR_ID_ATTRIBUTE])
        self.assertEqual(len(document.styles), 2)


class AnimateCursorTests(unittest.TestCase):
    def test_keyframes_split_duration_evenly(self):
        document = make_document()
        animate_cursor([WHIP, COINS, WHIP, COINS], duration=800, document=document)

        (marker, css), = document.styles.values()
        self.assertEqual(marker, "data-osrs-animate")
        self.assertEqual(
            css.splitlines(),
            [
                "@keyframes osrs-anim-1-rs {",
                f"  0.00% {{ cursor: {WHIP}; }}",
                f"  25.00% {{ cursor: {COINS}; }}",
                f"  50.00% {{ cursor: {WHIP}; }}",
                f"  75.00% {{ cursor: {COINS}; }}",
                "}",
                "* {",
                "  animation: osrs-anim-1-rs 800ms step-end infinite;",
                "}",
            ],
        )

    def test_scoped_animation_with_finite_iterations(self):
        document = make_document()
        target = ElementTarget()

        stop = animate_cursor([WHIP, COINS], target=target, iterations=3, document=document)

        self.assertEqual(target.attributes[ANIM_ID_ATTRIBUTE], "osrs-anim-1-rs-scope")
        (_, css), = document.styles.values()
        self.assertIn(f'[{ANIM_ID_ATTRIBUTE}="osrs-anim-1-rs-scope"] {{', css)
        self.assertIn("animation: osrs-anim-1-rs 1000ms step-end 3;", css)

        stop()
        self.assertEqual(document.styles, {})
        self.assertEqual(target.attributes, {})

    def test_requires_two_frames(self):
        with self.assertRaises(ValueError):
            animate_cursor([WHIP])
        with self.assertRaises(ValueError):
            animate_cursor([], document=make_document())


if __name__ == "__main__":
    unittest.main()
