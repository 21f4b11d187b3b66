# Event codes of get_paste outcomes (logged as `event`, returned as `errorCode`)
MISSING_URL = 'MISSING_URL'
PASTE_NOT_FOUND = 'PASTE_NOT_FOUND'
PASTE_EXPIRED = 'PASTE_EXPIRED'
GET_PASTE_SUCCESS = 'GET_PASTE_SUCCESS'
