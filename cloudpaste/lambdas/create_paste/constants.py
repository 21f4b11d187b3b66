# Event codes of create_paste outcomes (logged as `event`, returned as `errorCode`)
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_CONTENT = 'MISSING_CONTENT'
INVALID_EXPIRATION_POLICY = 'INVALID_EXPIRATION_POLICY'
CREATE_PASTE_SUCCESS = 'CREATE_PASTE_SUCCESS'
