# services/ai_advisor.py
import json
import logging
import random
from typing import Dict, List, Optional
from datetime import timedelta

import httpx
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.exceptions import UpstreamProviderError
from app.crud.wellness_entry import crud_wellness_entry
from app.integrations.ai_chat import ChatCompletionClient
from app.models.user import User
from app.models.wellness_entry import WellnessEntry
from app.schemas.ai import ChatRequest, ChatResponse, DataSummary, InsightsResponse, RecommendationsResponse
from app.services.wellness_stats import round_half_up

logger = logging.getLogger(__name__)


# =====================================================================
# STATIC CONTENT
# =====================================================================

FALLBACK_RESPONSES = [
    "I'm here to support your wellness journey! How are you feeling today?",
    "Let's work together to improve your mental and physical health. What's on your mind?",
    "I'm ready to help with tips, motivation, or just listen. What would you like to talk about?",
    "Your wellness matters to me. How can I support you today?",
    "Let's make today a great day for your health and wellbeing. What do you need help with?",
]

EMPTY_REPLY = "I'm here to help! How can I support your wellness journey today?"

CATEGORY_TIPS: Dict[str, List[str]] = {
    "sleep": [
        "Establish a consistent sleep schedule, even on weekends",
        "Avoid caffeine 6 hours before bedtime",
        "Create a relaxing bedtime routine with dim lighting",
        "Keep your bedroom cool and dark for optimal sleep",
        "Try meditation or deep breathing before bed",
    ],
    "exercise": [
        "Take a 10-minute walk every 2 hours during study sessions",
        "Try desk exercises like shoulder rolls and leg lifts",
        "Join a campus fitness class or sports club",
        "Use the stairs instead of elevators when possible",
        "Try a 15-minute morning yoga routine to start your day",
    ],
    "study": [
        "Use the Pomodoro Technique: 25 minutes focused study, 5-minute break",
        "Create a dedicated study space free from distractions",
        "Take notes by hand to improve retention",
        "Review material within 24 hours of learning",
        "Form study groups to discuss and reinforce concepts",
    ],
    "stress": [
        "Practice mindfulness meditation for 10 minutes daily",
        "Try journaling to process thoughts and emotions",
        "Connect with friends and family regularly",
        "Engage in hobbies that bring you joy",
        "Learn to say no to avoid overcommitting",
    ],
}

INSIGHT_PERIODS = {"7d": 7, "30d": 30}
MAX_RECOMMENDATIONS = 5

SYSTEM_PROMPT = """You are a friendly and supportive wellness assistant for students. Your role is to:

1. Provide personalized wellness advice based on the user's data
2. Offer motivation and encouragement
3. Suggest activities, study tips, and wellness practices
4. Help with stress management and mental health
5. Give practical tips for better sleep, nutrition, and exercise
6. Be empathetic, non-judgmental, and supportive

User's recent wellness data: {wellness_context}
User's goals: {goals}

Guidelines:
- Keep responses concise but helpful (2-3 sentences max)
- Use a warm, encouraging tone
- Provide actionable advice
- If user seems stressed or down, offer emotional support
- Suggest specific activities or techniques
- Reference their data when relevant
- Always end with a positive note or encouragement"""


def _averages(entries: List[WellnessEntry]) -> Dict[str, float]:
    count = len(entries)
    return {
        "steps": sum(e.steps or 0 for e in entries) / count,
        "sleep": sum(e.sleep_hours or 0 for e in entries) / count,
        "stress": sum(e.stress_level or 5 for e in entries) / count,
        "exercise_days": sum(1 for e in entries if e.exercised),
    }


class AIAdvisorService:
    """Chat replies, rule-based insights and static tips."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    # =====================================================================
    # CHAT
    # =====================================================================

    def build_system_prompt(self, db: Session, *, user: User, clock: Clock) -> str:
        today = clock.today()
        entries = crud_wellness_entry.query_range(
            db, user_id=user.id, start=today - timedelta(days=7), end=today, limit=5
        )
        wellness_context = [
            {
                "date": e.date.isoformat(),
                "steps": e.steps,
                "sleepHours": e.sleep_hours,
                "studyHours": e.study_hours,
                "stressLevel": e.stress_level,
                "mood": e.mood.value,
                "exercise": e.exercised,
                "waterIntake": e.water_intake,
            }
            for e in entries
        ]
        return SYSTEM_PROMPT.format(
            wellness_context=json.dumps(wellness_context),
            goals=json.dumps(user.goal_targets),
        )

    def chat(
        self,
        db: Session,
        *,
        user: User,
        request: ChatRequest,
        client: httpx.Client,
        clock: Clock,
    ) -> ChatResponse:
        """Ask the model; any failure is replaced by a canned reply with context "fallback"."""
        prompt = self.build_system_prompt(db, user=user, clock=clock)
        try:
            reply = ChatCompletionClient(client).complete(prompt, request.message)
        except UpstreamProviderError as exc:
            logger.warning(f"AI chat fell back for user {user.id}: {exc}")
            return ChatResponse(
                message=self.rng.choice(FALLBACK_RESPONSES),
                timestamp=clock.now(),
                context="fallback",
            )

        return ChatResponse(
            message=reply or EMPTY_REPLY,
            timestamp=clock.now(),
            context=request.context or "general",
        )

    # =====================================================================
    # INSIGHTS
    # =====================================================================

    def insights(
        self, db: Session, *, user: User, period: Optional[str], clock: Clock
    ) -> InsightsResponse:
        if period not in INSIGHT_PERIODS:
            period = "7d"
        today = clock.today()
        entries = crud_wellness_entry.query_range(
            db, user_id=user.id, start=today - timedelta(days=INSIGHT_PERIODS[period]), end=today
        )

        if not entries:
            return InsightsResponse(
                period=period,
                insights=["Start tracking your wellness data to get personalized insights!"],
                recommendations=["Begin by logging your daily activities, sleep, and mood."],
            )

        averages = _averages(entries)
        return InsightsResponse(
            period=period,
            insights=self._insights(averages, len(entries)),
            recommendations=self._recommendations(averages, user.goal_targets),
            data_summary=DataSummary(
                total_entries=len(entries),
                average_steps=round_half_up(averages["steps"]),
                average_sleep=round_half_up(averages["sleep"], 1),
                average_stress=round_half_up(averages["stress"], 1),
            ),
        )

    @staticmethod
    def _insights(averages: Dict[str, float], count: int) -> List[str]:
        insights = []

        if averages["steps"] < 5000:
            insights.append("You're averaging fewer than 5,000 steps daily. Consider taking short walks between study sessions.")
        elif averages["steps"] > 10000:
            insights.append("Great job maintaining high activity levels! You're consistently hitting your step goals.")

        if averages["sleep"] < 7:
            insights.append("Your sleep duration is below the recommended 7-9 hours. Try establishing a consistent bedtime routine.")
        else:
            insights.append("Excellent sleep habits! You're getting adequate rest for optimal performance.")

        if averages["stress"] > 7:
            insights.append("Your stress levels have been elevated. Consider incorporating relaxation techniques into your daily routine.")
        elif averages["stress"] < 5:
            insights.append("You're managing stress well! Keep up the great work with your wellness practices.")

        if averages["exercise_days"] < count * 0.3:
            insights.append("You could benefit from more regular exercise. Even 15-20 minutes daily can make a difference.")
        elif averages["exercise_days"] >= count * 0.5:
            insights.append("Fantastic exercise consistency! You're building healthy habits that will serve you well.")

        return insights

    @staticmethod
    def _recommendations(averages: Dict[str, float], goals: Dict[str, float]) -> List[str]:
        recommendations = []

        if averages["steps"] < goals["daily_steps"] * 0.8:
            recommendations.append("Try the 20-20-20 rule: every 20 minutes, take a 20-second break and walk 20 steps.")
            recommendations.append("Consider studying while walking on a treadmill or taking walking study breaks.")

        if averages["sleep"] < goals["sleep_hours"]:
            recommendations.append("Create a wind-down routine 1 hour before bed: dim lights, avoid screens, try reading or meditation.")
            recommendations.append("Keep your bedroom cool (18-20°C) and completely dark for optimal sleep.")

        if averages["stress"] > 6:
            recommendations.append("Practice the 4-7-8 breathing technique: inhale for 4, hold for 7, exhale for 8 seconds.")
            recommendations.append("Try progressive muscle relaxation before bed to reduce stress and improve sleep.")

        return recommendations

    # =====================================================================
    # RECOMMENDATIONS
    # =====================================================================

    def recommendations(self, *, category: Optional[str] = None) -> RecommendationsResponse:
        """Shuffled static tips, at most five. Unknown categories yield none."""
        categories = [category] if category else list(CATEGORY_TIPS)
        tips = [tip for name in categories for tip in CATEGORY_TIPS.get(name, [])]
        self.rng.shuffle(tips)
        return RecommendationsResponse(
            category=category or "all",
            recommendations=tips[:MAX_RECOMMENDATIONS],
        )


ai_advisor_service = AIAdvisorService()
