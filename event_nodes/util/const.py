OVERFLOW_REJECT_NEWEST = 'reject_newest'
OVERFLOW_DROP_OLDEST = 'drop_oldest'

# Field a behavior's return value must carry to request propagation
ACTION_NOTIFY_FIELD = 'notify'

# Step budget for StepDriver.run_until_idle; counted in single act() calls
DEFAULT_MAX_STEPS = 10000

# Debug buffer size for BufferEmitter
DEFAULT_BUFFER_SIZE = 1000

SENSITIVE_KEYS = frozenset({
    "api_key",
    "private_key",
    "authorization",
    "password",
    "token",
    "bearer",
    "secret",
})
