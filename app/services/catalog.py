"""
app.services.catalog
~~~~~~~~~~~~~~~~~~~~

平台内置的静态数据：徽章定义与免费 API 目录。
"""
from __future__ import annotations

from typing import Any

# ── 徽章 ──────────────────────────────────────────────────────────────

NEWCOMER_BADGE: dict[str, str] = {
    "name": "Newcomer",
    "icon": "fa-seedling",
    "color": "green",
}

FIRST_PROJECT_BADGE: dict[str, str] = {
    "name": "First Project",
    "icon": "fa-rocket",
    "color": "blue",
}

# ── 免费 API 目录（真实可用的公开 API）──────────────────────────────

FREE_APIS: tuple[dict[str, Any], ...] = (
    {
        "name": "JSONPlaceholder",
        "description": "Fake Online REST API for Testing and Prototyping",
        "endpoint": "https://jsonplaceholder.typicode.com/posts",
        "method": "GET",
        "category": "Development",
    },
    {
        "name": "OpenWeatherMap",
        "description": "Weather Data and API for developers",
        "endpoint": "https://api.openweathermap.org/data/2.5/weather",
        "method": "GET",
        "category": "Weather",
    },
    {
        "name": "CoinGecko",
        "description": "Cryptocurrency Market Data",
        "endpoint": "https://api.coingecko.com/api/v3/coins/markets",
        "method": "GET",
        "category": "Cryptocurrency",
    },
    {
        "name": "NewsAPI",
        "description": "Search worldwide news with code",
        "endpoint": "https://newsapi.org/v2/top-headlines",
        "method": "GET",
        "category": "News",
    },
    {
        "name": "REST Countries",
        "description": "Get information about countries via a RESTful API",
        "endpoint": "https://restcountries.com/v3.1/all",
        "method": "GET",
        "category": "Geography",
    },
    {
        "name": "The Cat API",
        "description": "Pictures and facts about cats",
        "endpoint": "https://api.thecatapi.com/v1/images/search",
        "method": "GET",
        "category": "Animals",
    },
)
