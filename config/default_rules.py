"""
Default moderation rules configuration
"""

PROFANITY_WORDS = [
    "shit", "fuck", "damn", "crap", "ass", "bitch", "bastard", "asshole",
    "dickhead", "bullshit", "motherfucker", "wtf", "stfu", "fck", "piss",
    "cock", "dick", "pussy", "whore", "slut", "tits", "boobs", "jerk",
    "douche", "douchebag", "dumbass", "jackass", "prick", "f*ck", "s**t",
    "b*tch", "a$$", "a$$hole", "sh!t", "f**k", "fu*k", "sh*t", "b!tch",
    "f**king", "f*cking", "fcuk", "fuk", "fuking",
    # Spanish, German, French, Italian
    "mierda", "puta", "pendejo", "cabrón", "joder", "coño", "scheisse",
    "scheiße", "putain", "merde", "cazzo", "fottiti",
]

SPAM_PATTERNS = [
    r"buy now",
    r"limited time offer",
    r"discount",
    r"click here",
    r"\bfree shipping\b",
    r"\bbest deal\b",
    r"\bact now\b",
    r"\bdon't miss out\b",
    r"\bdon't wait\b",
    r"\bspecial offer\b",
    r"\bexclusive deal\b",
    r"\bwhile supplies last\b",
    r"\blimited stock\b",
    r"\bfor a limited time\b",
    r"check out my (channel|page|website|profile)",
    r"\bfollow me\b",
    r"best (price|deal|offer) guaranteed",
    r"\blow prices\b",
    r"\bcheap\b",
    r"\bbargain\b",
    r"\bsave money\b",
    r"\bsale ends\b",
    r"\bnewsletter\b",
    r"\bsubscribe\b",
    r"\bonly \$\d+(\.\d+)?\b",
    r"\bcoupon code\b",
    r"\bpromo code\b",
    r"\bfree gift\b",
    r"\bgiveaway\b",
    r"\bwin a\b",
    r"\bmake money\b",
    r"\bwork from home\b",
    r"\bget rich\b",
    r"\bcasino\b",
    r"\bbetting\b",
    r"\bgambling\b",
    r"\blottery\b",
    r"\bviagra\b",
    r"\bcialis\b",
    r"\bweight loss\b",
    r"\bcryptocurrency\b",
    r"\bbitcoin\b",
    r"\binvest\b",
]

# Any single hit from this group flags the content
HIGH_PRIORITY_SPAM_PATTERNS = [
    r"\b(www|http)\S+",
    r"\bhttps?://\S+",
    r"casino\s+online",
    r"\bmake money fast\b",
    r"\bfree money\b",
]

HARASSMENT_PATTERNS = [
    r"\byou are (stupid|dumb|idiot)\b",
    r"\bshut up\b",
    r"\bgo away\b",
    r"hate you",
    r"\byou('re| are) (an )?(idiot|moron|pathetic|useless|worthless|loser)",
    r"\bi hate (you|this)",
    r"\bkill yourself\b",
    r"\bkys\b",
    r"\bget lost\b",
    r"\bf(uc)?k (you|off|yourself)\b",
    r"\bno one (likes|cares about) you\b",
    r"\byou('re| are) (a )?waste of (time|space|air|life)",
    r"\b(nobody|no one) asked\b",
    r"\byou('re| are) (garbage|trash)\b",
    r"\byou make me sick\b",
    r"\byou disgust me\b",
    r"\bshame on you\b",
    r"\byou('re| are) (a )?(joke|clown|fool)\b",
    r"\bpeople like you\b",
]

DEFAULT_MODERATION_RULES = [
    {
        "rule_type": "special_replacement",
        "patterns": ["caca"],
        "replacement_value": "\U0001F4A9",
        "description": "Replace caca with poop emoji",
        "is_regex": False,
        "severity": 0.0,
    },
    {
        "rule_type": "special_replacement",
        "patterns": ["shit"],
        "replacement_value": "\U0001F4A9",
        "description": "Replace shit with poop emoji",
        "is_regex": False,
        "severity": 0.0,
    },
    {
        "rule_type": "profanity",
        "patterns": PROFANITY_WORDS,
        "description": "Common profanity words",
        "is_regex": False,
        "severity": 0.7,
    },
    {
        "rule_type": "spam",
        "patterns": SPAM_PATTERNS,
        "description": "Common spam patterns",
        "is_regex": True,
        "severity": 0.6,
    },
    {
        "rule_type": "spam",
        "patterns": HIGH_PRIORITY_SPAM_PATTERNS,
        "description": "High priority spam patterns that should be immediately flagged",
        "is_regex": True,
        "severity": 0.9,
    },
    {
        "rule_type": "harassment",
        "patterns": HARASSMENT_PATTERNS,
        "description": "Harassment and aggressive language patterns",
        "is_regex": True,
        "severity": 0.8,
    },
]

DEFAULT_MODERATION_SETTINGS = {
    "enabled": True,
    "auto_moderate_safe": True,
    "auto_remove_high_risk": False,
    "toxicity_threshold": 0.7,
}


def seed_moderation_data(db_service):
    """
    Insert the default rule set when the rule store is empty

    Args:
        db_service: Database service instance

    Returns:
        int: number of rules created (0 when rules already exist)
    """
    if db_service.count_moderation_rules() > 0:
        return 0

    for rule in DEFAULT_MODERATION_RULES:
        db_service.create_moderation_rule(**rule)

    if db_service.get_moderation_settings() is None:
        db_service.save_moderation_settings(DEFAULT_MODERATION_SETTINGS)

    return len(DEFAULT_MODERATION_RULES)
