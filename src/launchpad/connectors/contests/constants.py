"""Endpoints and lookup tables for the public contest APIs."""

CODEFORCES_CONTESTS_URL = "https://codeforces.com/api/contest.list"
CODEFORCES_CONTEST_URL = "https://codeforces.com/contest/{id}"
CODEFORCES_LIMIT = 10

CODECHEF_CONTESTS_URL = "https://www.codechef.com/api/list/contests/all"
CODECHEF_CONTEST_URL = "https://www.codechef.com/{code}"
CODECHEF_LIMIT = 10

HACKEREARTH_EVENTS_URL = "https://www.hackerearth.com/api/events/upcoming/"
HACKEREARTH_DESCRIPTION_LIMIT = 150

KONTESTS_ALL_URL = "https://kontests.net/api/v1/all"
KONTESTS_LIMIT = 15

# Kontests "site" value -> display organization
KONTESTS_SITE_NAMES: dict[str, str] = {
    "CodeForces": "Codeforces",
    "CodeForces::Gym": "Codeforces Gym",
    "TopCoder": "TopCoder",
    "AtCoder": "AtCoder",
    "CS Academy": "CS Academy",
    "CodeChef": "CodeChef",
    "HackerRank": "HackerRank",
    "HackerEarth": "HackerEarth",
    "LeetCode": "LeetCode",
    "Toph": "Toph",
}

# Site substring -> extra tag (checked in order, all matches added)
KONTESTS_SITE_TAGS: list[tuple[str, str]] = [
    ("codeforces", "Algorithms"),
    ("leetcode", "DSA"),
    ("atcoder", "High Quality"),
    ("codechef", "Rated"),
]
