"""Tests for the display derivations and renderers."""

import json
from datetime import datetime
from io import StringIO

import pytest
from rich.console import Console

from zoho_mail.output.formatter import (
    OutputFormat,
    email_content_panel,
    email_status_icons,
    folder_icon,
    format_timestamp,
    label_swatch,
    render,
    render_json,
    truncate,
)
from zoho_mail.pdauth.types import Account, Email, EmailContent, Folder, Label


def _email(**overrides) -> Email:
    values = {
        "message_id": "m1",
        "folder_id": "F1",
        "subject": "Quarterly report",
        "from_address": "boss@example.com",
        "received_time": 1700000000000,
        "is_read": True,
    }
    values.update(overrides)
    return Email(**values)


def _buffer_console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=200), buffer


class TestDerivations:
    @pytest.mark.parametrize(
        ("folder_type", "icon"),
        [("Inbox", "📥"), ("Sent", "📤"), ("Trash", "🗑️"), ("Custom", "📁"), ("", "📁")],
    )
    def test_folder_icon(self, folder_type: str, icon: str) -> None:
        assert folder_icon(folder_type) == icon

    def test_status_icons_order(self) -> None:
        email = _email(is_read=False, is_flagged=True, has_attachment=True)
        assert email_status_icons(email) == "●⭐📎"

    def test_status_icons_dash_when_nothing_applies(self) -> None:
        assert email_status_icons(_email()) == "-"

    def test_label_swatch(self) -> None:
        assert label_swatch("#ff0000") == "[#ff0000]■[/#ff0000]"
        assert label_swatch("") == "-"
        assert label_swatch("not-a-colour") == "not-a-colour"

    def test_format_timestamp(self) -> None:
        expected = datetime.fromtimestamp(1700000000).strftime("%Y-%m-%d %H:%M")
        assert format_timestamp(1700000000000) == expected
        assert format_timestamp(None) == "-"

    @pytest.mark.parametrize("millis", [99999999999999999, -(10**20), 10**30])
    def test_format_timestamp_out_of_range(self, millis: int) -> None:
        assert format_timestamp(millis) == "-"

    def test_truncate(self) -> None:
        assert truncate("short", 10) == "short"
        assert truncate("a" * 30, 10) == "aaaaaaa..."


class TestRender:
    def test_json_is_list_of_records(self, capsys) -> None:
        render([Label(label_id="L1", label_name="Urgent", color="#f00")], OutputFormat.JSON)
        assert json.loads(capsys.readouterr().out) == [
            {"label_id": "L1", "label_name": "Urgent", "color": "#f00"}
        ]

    def test_json_empty_list(self, capsys) -> None:
        render([], "json")
        assert json.loads(capsys.readouterr().out) == []

    def test_compact_is_one_tab_separated_line_per_record(self, capsys) -> None:
        folders = [
            Folder(folder_id="1", folder_name="Inbox", folder_type="Inbox", path="/Inbox"),
            Folder(folder_id="2", folder_name="Work", folder_type="Custom"),
        ]
        render(folders, OutputFormat.COMPACT)
        assert capsys.readouterr().out.splitlines() == ["1\tInbox\t/Inbox", "2\tCustom\tWork"]

    def test_compact_email_line(self, capsys) -> None:
        render([_email(is_read=False)], OutputFormat.COMPACT)
        fields = capsys.readouterr().out.rstrip("\n").split("\t")
        assert fields[0] == "m1"
        assert fields[2] == "●"
        assert fields[3:] == ["boss@example.com", "Quarterly report"]

    def test_emails_table(self) -> None:
        out, buffer = _buffer_console()
        render([_email(is_flagged=True)], OutputFormat.TABLE, out=out)
        text = buffer.getvalue()
        assert "Subject" in text
        assert "Quarterly report" in text
        assert "⭐" in text

    def test_accounts_and_folders_tables(self) -> None:
        out, buffer = _buffer_console()
        render([Account(account_id="111", email_address="me@example.com")], out=out)
        render([Folder(folder_id="1", folder_name="Inbox", folder_type="Inbox", unread_count=4)], out=out)
        text = buffer.getvalue()
        assert "me@example.com" in text
        assert "📥 Inbox" in text
        assert "4" in text

    def test_markup_in_data_is_escaped(self) -> None:
        out, buffer = _buffer_console()
        render([Label(label_id="L1", label_name="[bold]x[/bold]")], out=out)
        assert "[bold]x[/bold]" in buffer.getvalue()

    def test_empty_table_prints_nothing(self) -> None:
        out, buffer = _buffer_console()
        render([], OutputFormat.TABLE, out=out)
        assert buffer.getvalue() == ""


class TestContentPanel:
    def test_panel_shows_headers_and_body(self) -> None:
        content = EmailContent(
            message_id="m1", content="Hello there", subject="Hi", from_address="a@b.com", cc_address="c@d.com"
        )
        out, buffer = _buffer_console()
        out.print(email_content_panel(content))
        text = buffer.getvalue()
        assert "From: a@b.com" in text
        assert "Cc: c@d.com" in text
        assert "Hello there" in text

    def test_render_json_dataclass(self) -> None:
        assert json.loads(render_json(EmailContent(message_id="m1", content="x")))["content"] == "x"
