"""Centralized message constants for error messages, validation, and activity text."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Queue Errors
    UNKNOWN_PROVIDER = (
        "Unknown provider {provider}! Currently, only {supported} is implemented as provider"
    )
    PLAYLIST_FULL = (
        "Sorry, the playlist has reached its maximum size of {max_tracks} tracks. "
        "Please come back later!"
    )
    ALREADY_QUEUED = (
        "Sorry, this track is already in the playlist at position #{position} "
        "and is expected to be played around {eta}!"
    )
    ALREADY_PLAYED = (
        "Sorry, this event does not allow duplicate tracks, and this track "
        "has already been played at {played_at}"
    )
    TRACK_DETAIL_FAILED = "Could not get details for track. Err={error}"
    TRACK_NOT_FOUND = "Track not found in playlist - maybe somebody else has deleted it meanwhile?"
    PLAYLIST_NOT_FOUND = "Playlist {playlist_id} of event {event_id} not found"

    # Playback Errors
    PLAY_FAILED = "Could not play track. Err={error}"
    NO_ACCOUNTS = (
        "No provider accounts registered with event, can't play track. "
        "Please select 'Edit Event' from the menu and add an account"
    )
    MAJORITY_PLAY_FAILED = "Play failed for majority of accounts:\n{details}"
    ACCOUNT_PLAY_FAILED = "Play failed for account {account}."
    DEVICE_NOT_FOUND_HINT = (
        " The provider could not find the device. Ensure that it is active by pressing "
        "play on the device, then press play again. Or remove this account using the "
        "edit event page."
    )
    FORBIDDEN_HINT = (
        " Playing was forbidden by the provider. Probably this is a free account; "
        "a premium account is required."
    )
    NO_DEVICE = "No devices available - Please start the player on the desired playback device"

    # Event Errors
    EVENT_EXISTS = "An Event with this ID already exists"
    EVENT_NOT_FOUND = "Event {event_id} not found"
    EVENT_ID_REQUIRED = "An Event ID is required"

    # Store Errors
    STORE_UNREACHABLE = "Store unreachable: {error}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "Timestamps must be timezone-aware (UTC)"

    # Settings Validation Errors
    INVALID_STORE_URL = "Store URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    OPENAI_API_KEY_NOT_SET = "OPENAI_API_KEY is not set; AI track curation is disabled."

    # Generic
    UNEXPECTED = "Unexpected error: {error}"


class ActivityMessages:
    """Human-readable text attached to published activities."""

    TRACK_ADDED = "{user} contributed {name}"
    TRACK_MOVED = "{user} moved {name} from pos {current_pos} to {new_pos}"
    TRACK_DELETED = "{user} deleted {name} at position {current_pos}"
    FEEDBACK_HATE_TO_LIKE = "{user} changed mind from hate to like regarding {name}"
    FEEDBACK_LIKE_TO_HATE = "{user} changed mind from like to hate regarding {name}"
    FEEDBACK_UNLIKE = "{user} does not like anymore {name}"
    FEEDBACK_LIKE = "{user} liked {name}"
    FEEDBACK_UNHATE = "{user} does not hate anymore {name}"
    FEEDBACK_HATE = "{user} hated {name}"
    AUTOMOVE_UP = "{system} auto moved up {current_pos}->{new_pos}: {name}"
    AUTOMOVE_DOWN = "{system} auto moved down {current_pos}->{new_pos}: {name}"
    TRACK_PLAY = "Now playing: {name}"
    TRACK_PAUSE = "Playback paused for {name} by {user}"
    TRACK_SKIP = "{user} skipped {name}"
    TRACK_SKIP_DUE2HATE = "Due to more hates than likes, {system} skipped {name}"
    PLAYLIST_AUTOFILLED = "{system} added {count} track{plural}"
    EVENT_CREATE = "Event {event_id} created by {owner}"
    EVENT_UPDATE = "Event {event_id} updated by {owner}"
    EVENT_DELETE = "Event {event_id} deleted by {owner}"
    PROVIDER_ADD = "{user} added {type}"
    PROVIDER_DEL = "{user} removed {type}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Store Operations
    STORE_PUT_ASYNC_FAILED = "Best-effort put of %s/%s failed - ignoring error: %r"
    STORE_FATAL = "!!! Store error !!! %r"
    STORE_CAS_REPLACED = "CAS replace of %s/%s succeeded (version %s -> %s)"
    STORE_CAS_REJECTED = "CAS replace of %s/%s rejected, expected version %s"

    # Queue Operations
    QUEUE_TRACK_ADDED = "Track ADDED event=%s, playlist=%s, track=%s:%s at pos %s"
    QUEUE_ADD_REJECTED_QUEUED = "ADD rejected because in playlist at pos %s"
    QUEUE_ADD_REJECTED_PLAYED = "ADD rejected because duplicates are not allowed and %s:%s was played"
    QUEUE_ADD_SKIP_FAILED = "Skip failed when current track was empty during add, ignoring: %r"
    QUEUE_TRACK_MOVED = "Track MOVED event=%s, playlist=%s, track=%s:%s, %s -> %s"
    QUEUE_TRACK_DELETED = "Track DELETED event=%s, playlist=%s, track=%s:%s at pos %s"
    QUEUE_FEEDBACK_APPLIED = "Feedback %r -> %r on %s:%s: likes=%s, hates=%s"
    QUEUE_FEEDBACK_IGNORED = "Feedback IGNORED - track %s:%s not found in playlist"
    QUEUE_AUTOMOVE = "Auto-move of %s:%s from %s to %s"
    QUEUE_HARD_SKIP = "HARD-SKIP: hates for current track of event %s above %s"
    QUEUE_AI_FAILED = "AI curation failed, inserting at the top: %r"

    # Autofill
    AUTOFILL_ADDED = "Autofill added %d track(s) to event %s"
    AUTOFILL_EXHAUSTED = (
        "Autofill could not find a new track in %d tries for event %s - pool exhausted"
    )
    AUTOFILL_SOURCE = "Autofill for event %s from %s (pool size %d)"

    # Playback Operations
    PLAYBACK_PLAY = "PLAY event=%s, playlist=%s, track=%s, startAt=%s, name=%s"
    PLAYBACK_PLAY_DEMO = "Demo mode active for event %s - play request is not executed"
    PLAYBACK_PLAY_FAILED = "!!! PLAY FAILED event=%s: %s"
    PLAYBACK_PAUSE = "PAUSE event=%s, playlist=%s"
    PLAYBACK_PAUSE_IGNORED = "Provider pause for event %s failed, ignoring: %r"
    PLAYBACK_SKIP = "SKIP event=%s, playlist=%s"
    PLAYBACK_SKIP_RECORDED = "Recording %s in effective playlist of event %s at %s%%"
    PLAYBACK_SKIP_NOT_RECORDED = "Track skipped at %s%% which is below required %s%%"
    PLAYBACK_HATE_SKIP = "Hate-skipped %s in event %s"
    PLAYBACK_END_OF_PLAYLIST = "End of playlist reached for event %s"

    # Timers
    TIMER_SET = "Set timer for event %s with timeout %s ms"
    TIMER_CLEARED = "Cleared timer for event %s"
    TIMER_STRANGE_TIMEOUT = (
        "Calculated strange timeout %s for event %s - adjusting to %s ms"
    )
    TIMER_EXPIRED = "Timer expired for event %s - check event"
    TIMER_CHECK_FAILED = "Timer check for event %s failed, retrying in %s ms: %r"

    # Provider
    PROVIDER_PLAY_ATTEMPT = "Provider play %s#%s try %d/%d"
    PROVIDER_PLAY_OK = "PLAY ok %s#%s"
    PROVIDER_PLAY_ERR = "PLAY err %s#%s: %s"
    PROVIDER_ACCOUNT_REMOVED = "PLAY err limit reached - account %s#%s is removed"
    PROVIDER_ESCALATE = "%.0f%% of play calls failed for event %s - pausing all accounts"
    PROVIDER_PAUSE_AFTER_ESCALATION_FAILED = "Pause after play escalation failed, ignoring: %r"
    PROVIDER_CLIENT_INITIALIZED = "Provider client initialized (base=%s, timeout=%ss)"

    # Activity
    ACTIVITY_PUBLISHED = "Activity %s for event %s: %s"
    ACTIVITY_PUBLISH_FAILED = "Publishing activity %s for event %s failed - ignoring: %r"

    # AI
    AI_CLIENT_INITIALIZED = "AI curator client ready (model=%s, timeout=%ss)"
    AI_RESPONSE_PARSE_ERROR = "AI curation response unusable: %s"
    AI_API_ERROR_RETRY = "AI curation attempt %d/%d failed: %s"
    AI_POSITION_SUGGESTED = "AI suggested position %d for %s (queue length %d)"

    # Events
    EVENT_CREATED = "Event CREATED eventId=%s, URL=%s"
    EVENT_UPDATED = "Event UPDATED eventId=%s"
    EVENT_MARKED_DELETED = "EVENT MARKED FOR DELETION %s"
    EVENT_DELETE_IGNORED = "deleteEvent ignored because event with id %s not found"
    EVENT_BACKGROUND_PLAYLIST = "Background playlist of event %s changed to %r (%d tracks)"
    EVENT_PROVIDER_ADDED = "Provider %s (%s) added to event %s"
    EVENT_PROVIDER_REMOVED = "Provider %s removed from event %s"
    EVENT_CHECK_FAILED = "checkEvent %s failed - ignored: %r"
    EVENT_CHECK_IGNORED = "checkEvent ignored for non-existing event %s"
    EVENT_STRANGE_ENTRY = "Ignoring strange event from store with key %s"
    TEST_EVENT_CREATED = "Created test event with id %s"

    # Scheduler
    SCHEDULER_STARTED = "Event scheduler started (interval=%s ms)"
    SCHEDULER_STOPPED = "Event scheduler stopped"
    SCHEDULER_ALREADY_RUNNING = "Event scheduler is already running"
    SCHEDULER_LOCK_CREATED = "Last sweep timestamp not present - creating it"
    SCHEDULER_TOO_EARLY = "Last sweep %s ms ago, below interval of %s ms - nothing to do"
    SCHEDULER_LOST_RACE = "Sweep lock taken by another replica - backing off"
    SCHEDULER_SWEEP_DONE = "Sweep of %d event(s) took %s ms"
    SCHEDULER_SWEEP_SLOW = (
        "Sweep took %s ms which is longer than the poll interval of %s ms - sweeps may overlap"
    )
    SCHEDULER_FATAL = "!!! Event sweep failed, terminating: %r"
    SCHEDULER_SWEEP_FAILED = "Sweep over events failed: %r"

    # Application Lifecycle
    APP_STARTING = "Starting event playlist service in {environment} mode"
    APP_CONTAINER_INITIALIZED = "Container initialized successfully"
    APP_INIT_FAILED = "Init failed, something is seriously wrong. Will terminate: %r"
    APP_LISTENING = "Now listening on %s:%s"
    APP_SHUTDOWN_COMPLETE = "Shutdown complete"
    APP_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    APP_FATAL_ERROR = "Fatal error: %s"
    APP_UNEXPECTED_ERROR = "Unexpected error on %s %s"
