"""
Static, read-only catalogs: reading material, support contacts and
relaxation audio offered alongside the conversation.
"""

from .models import Article, EmergencyContact, OnlineResource, RelaxationTrack

GENERAL_TOPIC = "general"

TOPICS: tuple[str, ...] = (
    GENERAL_TOPIC,
    "anxiety",
    "stress",
    "depression",
    "sleep",
    "relationships",
)

DEFAULT_LANGUAGE = "en"

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "te": "Telugu",
    "hi": "Hindi",
}

ARTICLES: tuple[Article, ...] = (
    Article(
        title="5 Ways to Manage Anxiety",
        topics=("anxiety", "stress"),
        summary=(
            "Deep breathing, progressive muscle relaxation, mindfulness, "
            "regular exercise and cutting back on caffeine and alcohol."
        ),
        url="#anxiety-management",
    ),
    Article(
        title="Understanding Depression: Signs and Support",
        topics=("depression",),
        summary=(
            "Common signs of depression and strategies for finding support, "
            "from routines to professional help."
        ),
        url="#depression-support",
    ),
    Article(
        title="How to Improve Your Sleep Quality",
        topics=("sleep",),
        summary=(
            "Keep a regular schedule, build a relaxing bedtime routine and "
            "limit screens before bed."
        ),
        url="#sleep-quality",
    ),
    Article(
        title="Building Healthy Relationships",
        topics=("relationships",),
        summary=(
            "Communicate openly, listen actively, set boundaries and resolve "
            "conflicts constructively."
        ),
        url="#healthy-relationships",
    ),
    Article(
        title="Mindfulness Techniques for Daily Life",
        topics=("stress", "anxiety", GENERAL_TOPIC),
        summary=(
            "Mindful breathing, body scans, mindful walking, eating and "
            "listening."
        ),
        url="#mindfulness-techniques",
    ),
    Article(
        title="Recognizing Burnout and Recovery Strategies",
        topics=("stress", GENERAL_TOPIC),
        summary=(
            "The signs of burnout and how to recover: breaks, boundaries, "
            "self-care and support."
        ),
        url="#burnout-recovery",
    ),
)

EMERGENCY_CONTACTS: tuple[EmergencyContact, ...] = (
    EmergencyContact(
        name="National Suicide Prevention Lifeline",
        number="1-800-273-8255",
        link="tel:18002738255",
    ),
    EmergencyContact(
        name="Crisis Text Line",
        number="Text HOME to 741741",
        link="sms:741741&body=HOME",
    ),
    EmergencyContact(
        name="National Domestic Violence Hotline",
        number="1-800-799-7233",
        link="tel:18007997233",
    ),
    EmergencyContact(
        name="National Mental Health Helpline",
        number="1-800-662-4357",
        link="tel:18006624357",
    ),
    EmergencyContact(
        name="Indian Mental Health Hotline",
        number="1800-599-0019",
        link="tel:18005990019",
    ),
)

RELAXATION_TRACKS: tuple[RelaxationTrack, ...] = (
    RelaxationTrack(
        title="Guided Breathing",
        url="https://assets.mixkit.co/music/preview/mixkit-meditation-flute-347.mp3",
    ),
    RelaxationTrack(
        title="Rain Sounds",
        url="https://assets.mixkit.co/sfx/preview/mixkit-light-rain-loop-1248.mp3",
    ),
    RelaxationTrack(
        title="Forest Ambience",
        url="https://assets.mixkit.co/sfx/preview/mixkit-forest-birds-ambience-1210.mp3",
    ),
    RelaxationTrack(
        title="Deep Sleep Music",
        url="https://assets.mixkit.co/music/preview/mixkit-deep-meditation-138.mp3",
    ),
    RelaxationTrack(
        title="Ocean Waves",
        url="https://assets.mixkit.co/sfx/preview/mixkit-sea-waves-loop-1196.mp3",
    ),
    RelaxationTrack(
        title="Meditation Guide",
        url="https://assets.mixkit.co/music/preview/mixkit-serene-view-122.mp3",
    ),
)

ONLINE_RESOURCES: tuple[OnlineResource, ...] = (
    OnlineResource(title="MentalHealth.gov", url="https://www.mentalhealth.gov"),
    OnlineResource(
        title="National Alliance on Mental Illness", url="https://www.nami.org"
    ),
    OnlineResource(title="Psychology Today", url="https://www.psychologytoday.com"),
)
