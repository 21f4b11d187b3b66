# Event codes of cleanup_admin outcomes (logged as `event`, returned as `errorCode`)
SWEEP_SUCCESS = 'SWEEP_SUCCESS'
STATUS_SUCCESS = 'STATUS_SUCCESS'
UNSUPPORTED_ROUTE = 'UNSUPPORTED_ROUTE'

# Time left for an in-progress deletion pipeline when a sweep runs out of Lambda time
SWEEP_DEADLINE_MARGIN_SECONDS = 5
