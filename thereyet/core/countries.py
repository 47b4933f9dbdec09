"""국가명 → ISO 3166-1 alpha-2 코드 테이블과 검색어 국가 언급 휴리스틱."""

from __future__ import annotations

COUNTRY_NAME_TO_CODE: dict[str, str] = {
    "United States": "US",
    "United States of America": "US",
    "USA": "US",
    "United Kingdom": "GB",
    "UK": "GB",
    "Great Britain": "GB",
    "England": "GB",
    "Scotland": "GB",
    "Wales": "GB",
    "Northern Ireland": "GB",
    "Canada": "CA",
    "Australia": "AU",
    "New Zealand": "NZ",
    "Ireland": "IE",
    "South Africa": "ZA",
    "Germany": "DE",
    "France": "FR",
    "Spain": "ES",
    "Italy": "IT",
    "Netherlands": "NL",
    "Belgium": "BE",
    "Switzerland": "CH",
    "Austria": "AT",
    "Sweden": "SE",
    "Norway": "NO",
    "Denmark": "DK",
    "Finland": "FI",
    "Poland": "PL",
    "Portugal": "PT",
    "Greece": "GR",
    "China": "CN",
    "Japan": "JP",
    "India": "IN",
    "South Korea": "KR",
    "Singapore": "SG",
    "Malaysia": "MY",
    "Thailand": "TH",
    "Indonesia": "ID",
    "Philippines": "PH",
    "Vietnam": "VN",
    "Brazil": "BR",
    "Mexico": "MX",
    "Argentina": "AR",
    "Chile": "CL",
    "Colombia": "CO",
    "Peru": "PE",
    "Saudi Arabia": "SA",
    "United Arab Emirates": "AE",
    "UAE": "AE",
    "Israel": "IL",
    "Egypt": "EG",
    "Nigeria": "NG",
    "Kenya": "KE",
    "Fiji": "FJ",
    "Papua New Guinea": "PG",
}

_LOWER_NAME_TO_CODE = {name.lower(): code for name, code in COUNTRY_NAME_TO_CODE.items()}

# 국가를 이미 지정했다고 간주하는 느슨한 신호. "in "과 ", "는 오탐이 많다.
_COUNTRY_HINT_TERMS = ("country:", "in ", ", ")


def get_country_code(country_name: str | None) -> str | None:
    """국가명(대소문자 무시)을 ISO 코드로 변환합니다."""
    if not country_name:
        return None

    name = country_name.strip()
    if name in COUNTRY_NAME_TO_CODE:
        return COUNTRY_NAME_TO_CODE[name]
    return _LOWER_NAME_TO_CODE.get(name.lower())


def query_contains_country(query: str) -> bool:
    """검색어가 이미 국가를 언급하는지 추정합니다.

    부분 문자열 매칭 기반 휴리스틱이라 오탐/미탐이 모두 가능합니다.
    결과는 국가 편향 적용 여부 판단에만 쓰고 정확성 보장으로 취급하지 않습니다.
    """
    lower_query = query.lower()
    if any(name in lower_query for name in _LOWER_NAME_TO_CODE):
        return True
    return any(term in lower_query for term in _COUNTRY_HINT_TERMS)
