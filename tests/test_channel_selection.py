"""Tests for resolving delivery channels from requests and preferences."""

import pytest

from eventcraft.domain.entities import (
    ChannelRequest,
    NotificationPreferences,
    determine_channels,
)


@pytest.mark.parametrize(
    ("requested", "preferences", "has_phone", "expected"),
    [
        (ChannelRequest(), NotificationPreferences(), False, ["in_app"]),
        (ChannelRequest(in_app=False), NotificationPreferences(), True, []),
        (ChannelRequest(email=True), NotificationPreferences(email=True), False, ["in_app", "email"]),
        (ChannelRequest(email=True), NotificationPreferences(email=None), False, ["in_app", "email"]),
        (ChannelRequest(email=True), NotificationPreferences(email=False), False, ["in_app"]),
        (ChannelRequest(sms=True), NotificationPreferences(sms=True), True, ["in_app", "sms"]),
        (ChannelRequest(sms=True), NotificationPreferences(sms=True), False, ["in_app"]),
        (ChannelRequest(sms=True), NotificationPreferences(sms=None), True, ["in_app"]),
        (ChannelRequest(sms=True), NotificationPreferences(sms=False), True, ["in_app"]),
        (
            ChannelRequest(in_app=True, email=True, sms=True),
            NotificationPreferences(email=True, sms=True),
            True,
            ["in_app", "email", "sms"],
        ),
    ],
)
def test_determine_channels(requested, preferences, has_phone, expected):
    """Each channel is the intersection of request, preference and reachability."""

    channels = determine_channels(preferences, requested, has_phone)

    assert channels.enabled_names() == expected
    assert not any(state.sent for _, state in channels.items())


def test_no_enabled_channel_counts_as_all_sent():
    channels = determine_channels(
        NotificationPreferences(), ChannelRequest(in_app=False), has_phone=False
    )

    assert channels.all_enabled_sent() is True
