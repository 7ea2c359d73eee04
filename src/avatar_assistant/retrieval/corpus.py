"""Built-in knowledge corpus searched by the retriever."""

from __future__ import annotations

from avatar_assistant.types import Document

KNOWLEDGE_BASE: tuple[Document, ...] = (
    # App navigation and features
    Document(
        doc_id="app-1",
        domain="app",
        title="FitBrain Rush",
        text=(
            "FitBrain Rush is a 7-question timed trivia game that teaches nutrition, fitness, "
            "and mindset with explanations and Daily Mindset Challenges. It's designed to be "
            "addictive and educational."
        ),
        route="/fitbrain-rush",
    ),
    Document(
        doc_id="app-2",
        domain="app",
        title="Shopping List",
        text=(
            "Your Shopping List stores grocery items and quantities. You can add items by voice "
            "or text. Smart consolidation groups similar items."
        ),
        route="/shopping-list",
    ),
    Document(
        doc_id="app-3",
        domain="app",
        title="Meal Calendar",
        text=(
            "Weekly Meal Calendar shows your planned meals for the week. You can generate meal "
            "plans, view recipes, and create shopping lists from your meals."
        ),
        route="/weekly-meal-calendar",
    ),
    Document(
        doc_id="app-4",
        domain="app",
        title="Craving Creator",
        text=(
            "Craving Creator helps you build meals from what you're craving. Input your cravings "
            "and get personalized meal suggestions that satisfy your desires while meeting your "
            "nutrition goals."
        ),
        route="/craving-creator",
    ),
    Document(
        doc_id="app-5",
        domain="app",
        title="Meal Logging",
        text=(
            "Log your meals to track nutrition and build eating patterns. The meal journal helps "
            "you understand your habits and progress toward your goals."
        ),
        route="/log-meals",
    ),
    Document(
        doc_id="app-6",
        domain="app",
        title="Water Tracking",
        text=(
            "Track your daily water intake to stay hydrated. Set goals and get reminders to drink "
            "water throughout the day."
        ),
        route="/log-water",
    ),
    # Nutrition knowledge
    Document(
        doc_id="nut-1",
        domain="nutrition",
        title="Protein Basics",
        text=(
            "Most adults training regularly do well at ~0.7-1.0 g protein per lb bodyweight/day, "
            "split 25-40g per meal. Good sources include lean meats, fish, eggs, dairy, legumes, "
            "and protein powder."
        ),
    ),
    Document(
        doc_id="nut-2",
        domain="nutrition",
        title="Meal Timing",
        text=(
            "Eat protein within 2 hours post-workout for recovery. Space meals 3-4 hours apart "
            "for stable energy. Don't stress perfect timing - consistency matters more than "
            "perfection."
        ),
    ),
    Document(
        doc_id="nut-3",
        domain="nutrition",
        title="Hydration",
        text=(
            "Aim for 8-10 glasses of water daily, more if you're active. Thirst is a late "
            "indicator - drink regularly throughout the day. Clear urine usually indicates good "
            "hydration."
        ),
    ),
    Document(
        doc_id="nut-4",
        domain="nutrition",
        title="Portion Control",
        text=(
            "Use your hand as a guide: palm-sized protein, cupped hand of carbs, thumb-sized "
            "fats, fist-sized vegetables. Adjust based on your goals and hunger levels."
        ),
    ),
    # Mindset and habits
    Document(
        doc_id="mind-1",
        domain="mindset",
        title="Habit Stacking",
        text=(
            "Attach a tiny action to a reliable daily cue (after coffee -> drink a glass of "
            "water). Start small - 2 minutes or less. Identity-based habits work: 'I'm the kind "
            "of person who...'"
        ),
    ),
    Document(
        doc_id="mind-2",
        domain="mindset",
        title="Progressive Overload",
        text=(
            "Gradually increase difficulty over time to keep adapting. In nutrition: add one "
            "serving of vegetables. In fitness: add 5 lbs or 1 rep. In habits: extend by 1 "
            "minute. Recovery and sleep are part of progress."
        ),
    ),
    Document(
        doc_id="mind-3",
        domain="mindset",
        title="Consistency Over Perfection",
        text=(
            "Aim for 80% adherence rather than 100% perfection. Missing one day doesn't matter - "
            "missing two days starts a pattern. Get back on track immediately after a slip."
        ),
    ),
    Document(
        doc_id="mind-4",
        domain="mindset",
        title="Environment Design",
        text=(
            "Make good choices easier and bad choices harder. Keep healthy snacks visible, hide "
            "junk food. Prep meals in advance. Set up your gym clothes the night before."
        ),
    ),
    Document(
        doc_id="mind-5",
        domain="mindset",
        title="Focus and Attention",
        text=(
            "Single-task when possible. Use time blocks for focused work. Take breaks every "
            "25-50 minutes. Batch similar tasks together. Turn off notifications during deep "
            "work."
        ),
    ),
)
