APP_BUNDLE_NAME = "com.transact.mobileorder"
APP_VERSION = "2025.1.1"
OS_VERSION = "18.1"
OS_TYPE = "0"
PUSH_TOKEN = "B924770E-7397-4DC9-9640-7031B73CEE63-75293-00000560A61D558D"
DEVICE_MODEL = "iPad Pro 3rd Gen (12.9 inch, 1TB, WiFi) / iPad / iPad8,6"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (iPad; CPU OS 18_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Mobile/15E148"
)
APP_USER_AGENT = "Transact%20Prod/58 CFNetwork/1568.200.51 Darwin/24.1.0"

BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
}

NAVIGATE_HEADERS = {
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Dest": "document",
}

SSO_PATH = "/idp/profile/SAML2/Redirect/SSO"
SSO_EXECUTION_CSRF = "e1s1"
SSO_EXECUTION_LOGIN = "e1s2"

CSRF_PATTERN = r'name="csrf_token"\s+value="([^"]+)"'
SAML_RESPONSE_PATTERN = r'name="SAMLResponse"\s+value="([^"]+)"'
TEMP_TOKEN_PATTERN = r'id="temp_token"[^>]*value="([^"]*)"'

SHIB_LOCAL_STORAGE_FIELDS = {
    "shib_idp_ls_exception.shib_idp_session_ss": "",
    "shib_idp_ls_success.shib_idp_session_ss": "true",
    "shib_idp_ls_value.shib_idp_session_ss": "",
    "shib_idp_ls_exception.shib_idp_persistent_ss": "",
    "shib_idp_ls_success.shib_idp_persistent_ss": "true",
    "shib_idp_ls_value.shib_idp_persistent_ss": "",
    "shib_idp_ls_supported": "true",
    "_eventId_proceed": "",
}

# api_user endpoints
ENDPOINT_SAML_LOGIN = "samllogin"
ENDPOINT_SAML_SUCCESS = "samlsuccess"
ENDPOINT_REGISTER = "registerwithcampusssotoken"
ENDPOINT_LOGIN_WITH_TOKEN = "loginwithtoken"
ENDPOINT_MENU = "getmenu"
ENDPOINT_CALCULATE_CART = "calculatecart"
ENDPOINT_PROCESS_ORDER = "processorderstaged"
ENDPOINT_ORDER_STATUS = "processorderstatuscheck"
ENDPOINT_LOCATIONS = "getlocations"
ENDPOINT_PAYMENT_METHODS = "getpaymentmethods"
ENDPOINT_ORDER_HISTORY = "getorderhistory"

PICKUP_TIME_MIN = "10"
PICKUP_TIME_MAX = "12"
CHECKOUT_CHOICE_IDS = ["782"]

CART_TEMPLATE = {
    "grand_total": "0",
    "pickup_time_max": "0",
    "upsell_upsellid": "0",
    "applepay_token": "",
    "pickup_time_min": "0",
    "subtotal": "0",
    "os_version": OS_VERSION,
    "target_date": "",
    "reorderid": "0",
    "target_time": "",
    "banner_message": "",
    "credit_total": "0",
    "promo_credit_total": "0",
    "cash_eq_swipes": "0",
    "subtotal_tax": "0",
    "ct_id2": "13418",
    "campaign_title": "",
    "punchcard_credit_total": "0",
    "userid": "",
    "special_comment": "",
    "campaign_credit_total": "0",
    "retrieval_type": "0",
    "campusid": "",
    "upsell_message": "",
    "os_type": OS_TYPE,
    "checkout_select_choiceids": [],
    "ct_id": "13418",
    "promo_code": "",
    "cash_eq_total": "0",
    "meal_ex_swipes": "0",
    "upsell_variantid": "0",
    "servicefee": "0",
    "campaign_description": "",
    "longitude": "-121.939543",
    "mealplan_discount": "0",
    "redeem_punchid": "0",
    "locationid": "",
    "payment_method_default": "0",
    "pickupspotid": "0",
    "meal_ex_total": "0",
    "servicefee_tax": "0",
    "app_bundle_name": APP_BUNDLE_NAME,
    "code_description": "",
    "upsell_itemid": "0",
    "tender2_subtotal": "0",
    "items": [],
    "push_token": PUSH_TOKEN,
    "app_version": APP_VERSION,
    "latitude": "37.348977",
}

LOCATION_NAMES = {
    "13": "Fire Grill",
    "6": "Spice Market",
    "870": "Trattoria",
    "3": "Slice",
    "9": "La Parilla",
    "1633": "Simply Oasis",
    "534": "Sushi",
    "1634": "Acai Bowl",
    "10": "Mission Bakery",
    "812": "The Chef's Table",
    "8": "Global Grill",
    "12": "Sunstream",
    "1364": "Fresh Bytes",
}
