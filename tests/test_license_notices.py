"""
Tests for admin notices built by LicenseManager.notices and the notice renderer.
"""

from licensekeeper.licensing.license_manager import LICENSE_OPTION
from licensekeeper.licensing.notices import Notice, NoticeRenderer


def _messages(renderer):
    return [notice.message for notice in renderer.notices]


class TestNoticeRenderer:
    """Tests for Notice and NoticeRenderer."""

    def test_render_with_paragraph(self):
        """Test autop wraps the message in a paragraph."""
        notice = Notice("error", "Bad key.", "license-notice")

        assert (
            notice.render()
            == '<div class="notice notice-error license-notice"><p>Bad key.</p></div>'
        )

    def test_render_without_paragraph(self):
        """Test autop=False leaves the markup as is."""
        notice = Notice("info", "<h3>Hi</h3>", autop=False)

        assert notice.render() == '<div class="notice notice-info"><h3>Hi</h3></div>'

    def test_renderer_keeps_order(self):
        """Test notices render in the order they were added."""
        renderer = NoticeRenderer()
        renderer.error("first")
        renderer.info("second")

        html = renderer.render_html()

        assert html.index("first") < html.index("second")
        assert [n.level for n in renderer.notices] == ["error", "info"]


class TestLicenseNotices:
    """Tests for LicenseManager.notices."""

    def test_missing_key_prompt(self, manager):
        """Test the missing key prompt links to the settings page."""
        renderer = manager.notices()

        assert len(renderer.notices) == 1
        notice = renderer.notices[0]
        assert notice.level == "info"
        assert "enter and activate" in notice.message
        assert 'href="/admin/settings"' in notice.message
        assert notice.css_class == "license-notice"

    def test_below_h2_class(self, manager):
        """Test the below-h2 class prefix."""
        renderer = manager.notices(below_h2=True)

        assert renderer.notices[0].css_class == "below-h2 license-notice"

    def test_active_license_has_no_notices(self, manager, options):
        """Test an active license produces no notices."""
        options.set(LICENSE_OPTION, {"key": "k", "type": "pro"})

        assert manager.notices().notices == []

    def test_expired_only(self, manager, options):
        """Test an expired license shows only the expired callout."""
        options.set(LICENSE_OPTION, {"key": "k", "is_expired": True})

        renderer = manager.notices()

        assert len(renderer.notices) == 1
        notice = renderer.notices[0]
        assert notice.level == "error"
        assert notice.autop is False
        assert "Your license has expired" in notice.message
        assert "utm_content=Renew+Now" in notice.message
        assert "disabled" not in notice.message
        assert "invalid" not in notice.message

    def test_disabled_callout(self, manager, options):
        """Test the disabled callout."""
        options.set(LICENSE_OPTION, {"key": "k", "is_disabled": True})

        messages = _messages(manager.notices())

        assert len(messages) == 1
        assert "has been disabled" in messages[0]

    def test_invalid_callout(self, manager, options):
        """Test the invalid callout."""
        options.set(LICENSE_OPTION, {"key": "k", "status": "invalid"})

        messages = _messages(manager.notices())

        assert len(messages) == 1
        assert "is invalid" in messages[0]

    def test_collected_messages_order(self, manager, options):
        """Test errors come before success messages and are joined with <br>."""
        options.set(LICENSE_OPTION, {"key": "k", "is_disabled": True})
        manager.errors.extend(["first error", "second <error>"])
        manager.success.append("done")

        renderer = manager.notices()

        messages = _messages(renderer)
        assert len(messages) == 3
        assert "has been disabled" in messages[0]
        assert messages[1] == "first error<br>second &lt;error&gt;"
        assert messages[2] == "done"
        assert [n.level for n in renderer.notices] == ["error", "error", "info"]

    def test_notices_do_not_change_state(self, manager, options):
        """Test rendering notices leaves the collected messages alone."""
        manager.errors.append("oops")

        manager.notices()
        manager.notices()

        assert manager.errors == ["oops"]
