"""Display colors for appointment cards."""

from __future__ import annotations

CATEGORY_COLORS = {
    "Hair": "bg-pink-100 border-pink-400 text-pink-800",
    "Beauty": "bg-purple-100 border-purple-400 text-purple-800",
    "Massage": "bg-green-100 border-green-400 text-green-800",
    "Facial": "bg-blue-100 border-blue-400 text-blue-800",
    "Facial & Skincare": "bg-blue-100 border-blue-400 text-blue-800",
    "Nails": "bg-orange-100 border-orange-400 text-orange-800",
    "Nail Services": "bg-orange-100 border-orange-400 text-orange-800",
    "Waxing": "bg-red-100 border-red-400 text-red-800",
    "Lash": "bg-indigo-100 border-indigo-400 text-indigo-800",
    "Brow": "bg-teal-100 border-teal-400 text-teal-800",
    "Makeup": "bg-rose-100 border-rose-400 text-rose-800",
    "Spa": "bg-emerald-100 border-emerald-400 text-emerald-800",
    "Other": "bg-gray-100 border-gray-400 text-gray-800",
}

STATUS_COLORS = {
    "completed": "bg-green-100 border-green-300 text-green-800",
    "arrived": "bg-blue-100 border-blue-300 text-blue-800",
    "started": "bg-yellow-100 border-yellow-300 text-yellow-800",
    "did_not_show": "bg-red-100 border-red-300 text-red-800",
    "cancelled": "bg-gray-200 border-gray-400 text-gray-600",
}
DEFAULT_STATUS_COLOR = "bg-gray-100 border-gray-300 text-gray-800"

STAFF_COLORS = (
    "text-purple-600",
    "text-pink-600",
    "text-indigo-600",
    "text-teal-600",
    "text-orange-600",
    "text-cyan-600",
    "text-emerald-600",
    "text-rose-600",
    "text-violet-600",
    "text-amber-600",
)


def category_color(category: str | None) -> str:
    return CATEGORY_COLORS.get(category or "Other", CATEGORY_COLORS["Other"])


def status_color(status: str | None) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_STATUS_COLOR)


def _string_hash(text: str) -> int:
    # 31-multiplier hash over UTF-16 code units, wrapped to a signed 32-bit int
    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def staff_color(staff_name: str) -> str:
    """Stable per-staff color so a person keeps their color across weeks."""
    return STAFF_COLORS[abs(_string_hash(staff_name)) % len(STAFF_COLORS)]
