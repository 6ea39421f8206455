# Wizard state constants

# Data-collection steps, strictly ordered. Each one owns a single draft field.
STEP_PLATFORM = 1   # draft.platform
STEP_ACCOUNT = 2    # draft.accountId (betting-account identifier)
STEP_NETWORK = 3    # draft.network
STEP_PHONE = 4      # draft.phone (filtered by draft.network)
STEP_AMOUNT = 5     # draft.amount (+ draft.withdrawalCode for withdrawals)

STEPS = (STEP_PLATFORM, STEP_ACCOUNT, STEP_NETWORK, STEP_PHONE, STEP_AMOUNT)
FIRST_STEP = STEP_PLATFORM
LAST_STEP = STEP_AMOUNT


def step_state(step: int) -> str:
    return f"STEP_{int(step)}"


# Confirmation gate: blocking modal over step 5, draft frozen for display
CONFIRMING = "CONFIRMING"

# Remote create-transaction call in flight
SUBMITTING = "SUBMITTING"

# Deposit created with a hosted link; user picks cancel or continue
LINK_INTERSTITIAL = "LINK_INTERSTITIAL"

# Deposit created, USSD directive shown (merchant number + dial code)
USSD_MODAL = "USSD_MODAL"

# Terminal: client is redirected to the dashboard, draft discarded
COMPLETED = "COMPLETED"

STEP_STATES = {step_state(s) for s in STEPS}

KIND_DEPOSIT = "deposit"
KIND_WITHDRAWAL = "withdrawal"
KINDS = (KIND_DEPOSIT, KIND_WITHDRAWAL)
