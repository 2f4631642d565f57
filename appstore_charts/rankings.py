# appstore_charts/rankings.py
"""Closed value sets for countries, ranking types and category types,
with their mapping to the upstream Apple feed codes."""
from enum import Enum
from typing import Dict, Optional


class Country(str, Enum):
    JP = "JP"
    US = "US"
    GB = "GB"
    CN = "CN"
    KR = "KR"

    @property
    def apple_code(self) -> str:
        return COUNTRIES[self]["apple_code"]

    @property
    def display_name(self) -> str:
        return COUNTRIES[self]["name"]

    @property
    def name_ja(self) -> str:
        return COUNTRIES[self]["name_ja"]


COUNTRIES: Dict[Country, Dict[str, str]] = {
    Country.JP: {"name": "Japan", "name_ja": "日本", "flag": "🇯🇵", "apple_code": "jp"},
    Country.US: {"name": "United States", "name_ja": "アメリカ", "flag": "🇺🇸", "apple_code": "us"},
    Country.GB: {"name": "United Kingdom", "name_ja": "イギリス", "flag": "🇬🇧", "apple_code": "gb"},
    Country.CN: {"name": "China", "name_ja": "中国", "flag": "🇨🇳", "apple_code": "cn"},
    Country.KR: {"name": "South Korea", "name_ja": "韓国", "flag": "🇰🇷", "apple_code": "kr"},
}


class RankingType(str, Enum):
    TOP_GROSSING = "topgrossing"
    TOP_FREE = "topfree"
    TOP_PAID = "toppaid"

    @property
    def display_name(self) -> str:
        return RANKING_TYPES[self]["name"]

    @property
    def name_ja(self) -> str:
        return RANKING_TYPES[self]["name_ja"]


# marketing-tools path is None where that feed has no such chart
RANKING_TYPES: Dict[RankingType, Dict[str, Optional[str]]] = {
    RankingType.TOP_GROSSING: {
        "name": "Top Grossing",
        "name_ja": "トップセールス",
        "marketing_path": None,
        "itunes_feed": "topgrossingapplications",
    },
    RankingType.TOP_FREE: {
        "name": "Top Free",
        "name_ja": "トップ無料DL",
        "marketing_path": "top-free",
        "itunes_feed": "topfreeapplications",
    },
    RankingType.TOP_PAID: {
        "name": "Top Paid",
        "name_ja": "トップ有料DL",
        "marketing_path": "top-paid",
        "itunes_feed": "toppaidapplications",
    },
}


class CategoryType(str, Enum):
    ALL = "all"
    GAMES = "games"
    ENTERTAINMENT = "entertainment"
    SOCIAL_NETWORKING = "socialNetworking"
    PHOTO_VIDEO = "photoVideo"
    MUSIC = "music"
    LIFESTYLE = "lifestyle"
    SHOPPING = "shopping"
    HEALTH_FITNESS = "healthFitness"
    FINANCE = "finance"
    PRODUCTIVITY = "productivity"
    UTILITIES = "utilities"
    EDUCATION = "education"
    BUSINESS = "business"
    NEWS = "news"
    TRAVEL = "travel"
    FOOD_DRINK = "foodDrink"
    SPORTS = "sports"

    @property
    def genre_id(self) -> Optional[int]:
        return CATEGORY_TYPES[self]["genre_id"]

    @property
    def display_name(self) -> str:
        return CATEGORY_TYPES[self]["name"]

    @property
    def name_ja(self) -> str:
        return CATEGORY_TYPES[self]["name_ja"]


CATEGORY_TYPES: Dict[CategoryType, Dict] = {
    CategoryType.ALL: {"name": "All Categories", "name_ja": "総合", "genre_id": None},
    CategoryType.GAMES: {"name": "Games", "name_ja": "ゲーム総合", "genre_id": 6014},
    CategoryType.ENTERTAINMENT: {"name": "Entertainment", "name_ja": "エンタメ", "genre_id": 6016},
    CategoryType.SOCIAL_NETWORKING: {"name": "Social Networking", "name_ja": "SNS", "genre_id": 6005},
    CategoryType.PHOTO_VIDEO: {"name": "Photo & Video", "name_ja": "写真/ビデオ", "genre_id": 6008},
    CategoryType.MUSIC: {"name": "Music", "name_ja": "ミュージック", "genre_id": 6011},
    CategoryType.LIFESTYLE: {"name": "Lifestyle", "name_ja": "ライフスタイル", "genre_id": 6012},
    CategoryType.SHOPPING: {"name": "Shopping", "name_ja": "ショッピング", "genre_id": 6024},
    CategoryType.HEALTH_FITNESS: {"name": "Health & Fitness", "name_ja": "ヘルスケア/フィットネス", "genre_id": 6013},
    CategoryType.FINANCE: {"name": "Finance", "name_ja": "ファイナンス", "genre_id": 6015},
    CategoryType.PRODUCTIVITY: {"name": "Productivity", "name_ja": "仕事効率化", "genre_id": 6007},
    CategoryType.UTILITIES: {"name": "Utilities", "name_ja": "ユーティリティ", "genre_id": 6002},
    CategoryType.EDUCATION: {"name": "Education", "name_ja": "教育", "genre_id": 6017},
    CategoryType.BUSINESS: {"name": "Business", "name_ja": "ビジネス", "genre_id": 6000},
    CategoryType.NEWS: {"name": "News", "name_ja": "ニュース", "genre_id": 6009},
    CategoryType.TRAVEL: {"name": "Travel", "name_ja": "旅行", "genre_id": 6003},
    CategoryType.FOOD_DRINK: {"name": "Food & Drink", "name_ja": "フード/ドリンク", "genre_id": 6023},
    CategoryType.SPORTS: {"name": "Sports", "name_ja": "スポーツ", "genre_id": 6004},
}

DEFAULT_CATEGORY = CategoryType.ALL

# Apple genre id -> display info (top-level genres, then game subgenres)
APP_CATEGORIES = {
    "6018": {"name": "Books", "name_ja": "ブック", "is_game": False},
    "6000": {"name": "Business", "name_ja": "ビジネス", "is_game": False},
    "6022": {"name": "Catalogs", "name_ja": "カタログ", "is_game": False},
    "6026": {"name": "Developer Tools", "name_ja": "デベロッパツール", "is_game": False},
    "6017": {"name": "Education", "name_ja": "教育", "is_game": False},
    "6016": {"name": "Entertainment", "name_ja": "エンタメ", "is_game": False},
    "6015": {"name": "Finance", "name_ja": "ファイナンス", "is_game": False},
    "6023": {"name": "Food & Drink", "name_ja": "フード/ドリンク", "is_game": False},
    "6014": {"name": "Games", "name_ja": "ゲーム", "is_game": True},
    "6027": {"name": "Graphics & Design", "name_ja": "グラフィック/デザイン", "is_game": False},
    "6013": {"name": "Health & Fitness", "name_ja": "ヘルスケア/フィットネス", "is_game": False},
    "6061": {"name": "Kids", "name_ja": "キッズ", "is_game": False},
    "6012": {"name": "Lifestyle", "name_ja": "ライフスタイル", "is_game": False},
    "6021": {"name": "Magazines & Newspapers", "name_ja": "雑誌/新聞", "is_game": False},
    "6020": {"name": "Medical", "name_ja": "メディカル", "is_game": False},
    "6011": {"name": "Music", "name_ja": "ミュージック", "is_game": False},
    "6010": {"name": "Navigation", "name_ja": "ナビゲーション", "is_game": False},
    "6009": {"name": "News", "name_ja": "ニュース", "is_game": False},
    "6008": {"name": "Photo & Video", "name_ja": "写真/ビデオ", "is_game": False},
    "6007": {"name": "Productivity", "name_ja": "仕事効率化", "is_game": False},
    "6006": {"name": "Reference", "name_ja": "辞書/辞典/その他", "is_game": False},
    "6024": {"name": "Shopping", "name_ja": "ショッピング", "is_game": False},
    "6005": {"name": "Social Networking", "name_ja": "SNS", "is_game": False},
    "6004": {"name": "Sports", "name_ja": "スポーツ", "is_game": False},
    "6003": {"name": "Travel", "name_ja": "旅行", "is_game": False},
    "6002": {"name": "Utilities", "name_ja": "ユーティリティ", "is_game": False},
    "6001": {"name": "Weather", "name_ja": "天気", "is_game": False},
    "7001": {"name": "Action", "name_ja": "アクション", "is_game": True},
    "7002": {"name": "Adventure", "name_ja": "アドベンチャー", "is_game": True},
    "7003": {"name": "Arcade", "name_ja": "アーケード", "is_game": True},
    "7004": {"name": "Board", "name_ja": "ボード", "is_game": True},
    "7005": {"name": "Card", "name_ja": "カード", "is_game": True},
    "7006": {"name": "Casino", "name_ja": "カジノ", "is_game": True},
    "7007": {"name": "Dice", "name_ja": "サイコロ", "is_game": True},
    "7008": {"name": "Educational", "name_ja": "教育", "is_game": True},
    "7009": {"name": "Family", "name_ja": "ファミリー", "is_game": True},
    "7011": {"name": "Music", "name_ja": "ミュージック", "is_game": True},
    "7012": {"name": "Puzzle", "name_ja": "パズル", "is_game": True},
    "7013": {"name": "Racing", "name_ja": "レーシング", "is_game": True},
    "7014": {"name": "Role Playing", "name_ja": "ロールプレイング", "is_game": True},
    "7015": {"name": "Simulation", "name_ja": "シミュレーション", "is_game": True},
    "7016": {"name": "Sports", "name_ja": "スポーツ", "is_game": True},
    "7017": {"name": "Strategy", "name_ja": "ストラテジー", "is_game": True},
    "7018": {"name": "Trivia", "name_ja": "トリビア", "is_game": True},
    "7019": {"name": "Word", "name_ja": "ワード", "is_game": True},
}


def category_name(category_id: Optional[str], field: str = "name") -> Optional[str]:
    """Display name for an Apple genre id; field="name_ja" for the Japanese one."""
    if not category_id:
        return None
    info = APP_CATEGORIES.get(str(category_id))
    return info[field] if info else None
