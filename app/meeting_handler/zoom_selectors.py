"""
Zoom web client selectors, URL patterns and meeting signals.

This module centralizes every Zoom UI heuristic used by the automator:
- Home / sign-in / meeting route patterns
- Candidate locators for the meeting-start flow
- Entry-prompt and in-meeting prompt lists
- "Meeting is active" signals

Note: the Zoom web client is updated frequently, so these lists are ordered
from most to least reliable and may need periodic maintenance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Pattern

from .locators import CssMatch, LocatorStrategy, RoleMatch, TextMatch, pattern

# =============================================================================
# URL PATTERNS
# =============================================================================

HOME_ROUTE = pattern(r"/wc/home")
SIGNIN_ROUTE = pattern(r"/signin")
MEETING_ROUTE = pattern(r"/wc/\d+/(start|join)")
AUTH_ROUTE = pattern(r"signin|login|sso|mfa|verify")
MEETING_TITLE = pattern(r"zoom meeting")


def is_home_or_signin(url: str) -> bool:
    return bool(HOME_ROUTE.search(url) or SIGNIN_ROUTE.search(url))


# =============================================================================
# DOM SELECTORS
# =============================================================================

ZOOM_SELECTORS: Dict[str, List[LocatorStrategy]] = {
    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    # Any of these present means the profile is logged out
    "sign_in_controls": [
        RoleMatch("button", pattern(r"sign in"), label="sign-in-button"),
        RoleMatch("link", pattern(r"sign in"), label="sign-in-link"),
    ],

    # -------------------------------------------------------------------------
    # Meeting creation
    # -------------------------------------------------------------------------

    "new_meeting_button": [
        RoleMatch("button", pattern(r"new meeting"), label="new-meeting-role"),
        RoleMatch("button", pattern(r"host a meeting"), label="host-meeting-role"),
        CssMatch('button:has-text("New Meeting")', label="new-meeting-css"),
    ],

    # Dropdown next to "New Meeting" holding the "Use PMI" toggle
    "meeting_options_menu": [
        RoleMatch("button", pattern(r"new meeting options"), label="new-meeting-options"),
        RoleMatch("button", pattern(r"meeting options"), label="meeting-options"),
        CssMatch(
            'button[aria-haspopup="menu"][aria-label*="meeting" i], '
            'button[aria-haspopup="menu"][title*="meeting" i]',
            label="meeting-options-css",
        ),
    ],

    "use_pmi_toggle": [
        RoleMatch("menuitemcheckbox", pattern(r"use pmi"), label="pmi-menuitemcheckbox"),
        RoleMatch("checkbox", pattern(r"use pmi"), label="pmi-checkbox"),
        CssMatch('[role="menuitemcheckbox"]:has-text("Use PMI")', label="pmi-css"),
        CssMatch('label:has-text("Use PMI")', label="pmi-label"),
    ],

    # -------------------------------------------------------------------------
    # Entry-prompt cascade
    # -------------------------------------------------------------------------

    "entry_prompts": [
        RoleMatch("button", pattern(r"start meeting"), label="start-meeting"),
        RoleMatch("button", pattern(r"start this meeting"), label="start-this-meeting"),
        CssMatch(
            'button:has-text("Start this Meeting"), [role="button"]:has-text("Start this Meeting"), '
            '.zm-button--primary:has-text("Start this Meeting")',
            label="start-this-meeting-css",
        ),
        RoleMatch("button", pattern(r"join meeting"), label="join-meeting"),
        RoleMatch("button", pattern(r"join from (your )?browser"), label="join-browser"),
        RoleMatch("button", pattern(r"continue in browser"), label="continue-browser"),
        RoleMatch("button", pattern(r"launch meeting"), label="launch-meeting"),
        RoleMatch("button", pattern(r"^got it$"), label="got-it"),
        RoleMatch("button", pattern(r"^i agree$"), label="agree"),
        RoleMatch(
            "button",
            pattern(r"continue without microphone and camera"),
            label="continue-without-mic-cam",
        ),
        TextMatch(pattern(r"continue without microphone and camera"), label="continue-without-mic-cam-text"),
    ],

    "audio_prompts": [
        RoleMatch("button", pattern(r"join audio by computer"), label="join-audio-computer"),
        RoleMatch("button", pattern(r"join with computer audio"), label="join-computer-audio"),
        RoleMatch("button", pattern(r"join audio"), label="join-audio"),
    ],

    "in_meeting_prompts": [
        RoleMatch(
            "button",
            pattern(r"continue without microphone and camera"),
            label="continue-without-mic-cam",
        ),
        TextMatch(pattern(r"continue without microphone and camera"), label="continue-without-mic-cam-text"),
        RoleMatch("button", pattern(r"^ok$"), label="floating-reactions-ok"),
        RoleMatch("button", pattern(r"^join audio$"), label="join-audio-control"),
    ],

    # Anything here means Zoom is still asking before the meeting starts
    "pre_join_signals": [
        RoleMatch("button", pattern(r"start meeting"), label="start-meeting"),
        RoleMatch("button", pattern(r"join meeting"), label="join-meeting"),
        RoleMatch("button", pattern(r"join from (your )?browser"), label="join-browser"),
        RoleMatch("button", pattern(r"continue in browser"), label="continue-browser"),
        RoleMatch("button", pattern(r"launch meeting"), label="launch-meeting"),
        TextMatch(pattern(r"you are already in another meeting"), label="already-in-meeting"),
        TextMatch(pattern(r"start this meeting"), label="start-this-meeting-text"),
    ],

    # -------------------------------------------------------------------------
    # Audio/Video Control Selectors
    # -------------------------------------------------------------------------

    "mic_on_fallback": [
        CssMatch(
            'button[aria-pressed="true"][aria-label*="mic" i], '
            'button[aria-pressed="true"][aria-label*="microphone" i], '
            'button[aria-pressed="true"][aria-label*="audio" i]',
            label="mic-pressed",
        ),
    ],

    "camera_on_fallback": [
        CssMatch(
            'button[aria-pressed="true"][aria-label*="camera" i], '
            'button[aria-pressed="true"][aria-label*="video" i]',
            label="camera-pressed",
        ),
    ],
}

MIC_LABEL = pattern(r"microphone|mic|audio")
CAMERA_LABEL = pattern(r"camera|video")
TURN_OFF_LABEL = pattern(r"turn off|stop")


# =============================================================================
# CROSS-FRAME PROMPTS
# =============================================================================

@dataclass(frozen=True)
class FramePrompt:
    """An actionable prompt searched for in every frame by text."""
    label: str
    text: Pattern[str]


FRAME_ENTRY_PROMPTS = [
    FramePrompt("start-this-meeting-frame", pattern(r"start this meeting")),
    FramePrompt("continue-without-mic-cam-frame", pattern(r"continue without microphone and camera")),
]

FRAME_IN_MEETING_PROMPTS = FRAME_ENTRY_PROMPTS + [
    FramePrompt("floating-reactions-ok-frame", pattern(r"^ok$")),
]

PRE_JOIN_FRAME_TEXT = [
    pattern(r"you are already in another meeting"),
    pattern(r"start this meeting"),
    pattern(r"continue without microphone and camera"),
]


# =============================================================================
# ACTIVE-MEETING SIGNALS
# =============================================================================

@dataclass(frozen=True)
class MeetingSignal:
    """A page observation suggesting the meeting is live."""
    name: str
    strategy: LocatorStrategy
    strong: bool = True


PAGE_MEETING_SIGNALS = [
    MeetingSignal("role-leave-end", RoleMatch("button", pattern(r"leave|end"))),
    MeetingSignal("text-leave-end", CssMatch('button:has-text("Leave"), button:has-text("End")')),
    MeetingSignal("testid-leave-end", CssMatch('[data-testid*="leave"], [data-testid*="end"]')),
    MeetingSignal("host-now-banner", TextMatch(pattern(r"you are host now"))),
    MeetingSignal("controlbar-join-audio", RoleMatch("button", pattern(r"join audio"))),
    MeetingSignal("controlbar-start-video", RoleMatch("button", pattern(r"start video"))),
    MeetingSignal("controlbar-audio", RoleMatch("button", pattern(r"^audio$"))),
    MeetingSignal("controlbar-video", RoleMatch("button", pattern(r"^video$"))),
    MeetingSignal(
        "meeting-banner-mic-cam",
        TextMatch(pattern(r"please enable access to your microphone and camera")),
    ),
]

# Exact control-bar labels; found in any frame they count as a strong signal
FRAME_MEETING_SIGNALS = [
    ("join-audio", pattern(r"^join audio$")),
    ("start-video", pattern(r"^start video$")),
    ("participants", pattern(r"^participants$")),
    ("reactions", pattern(r"^reactions$")),
    ("share-screen", pattern(r"^share screen$")),
    ("security", pattern(r"^security$")),
    ("ai-companion", pattern(r"^ai companion$")),
    ("end", pattern(r"^end$")),
]


def get_selectors_for(element_type: str) -> List[LocatorStrategy]:
    """
    Get list of locator strategies for a specific element type.

    Args:
        element_type: Key from ZOOM_SELECTORS dict

    Returns:
        List of strategies to try, most reliable first
    """
    return ZOOM_SELECTORS.get(element_type, [])


def page_signals(weak_names: List[str]) -> List[MeetingSignal]:
    """Page signals with the configured names downgraded to weak."""
    weak = set(weak_names)
    return [
        MeetingSignal(signal.name, signal.strategy, strong=False) if signal.name in weak else signal
        for signal in PAGE_MEETING_SIGNALS
    ]
