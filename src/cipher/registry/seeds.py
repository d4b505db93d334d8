"""Built-in handler catalog.

Each row describes one external handler the brain can route work to. Only
``smart_file_rebuilder`` declares structural refactoring, so structural
problems always land on it.
"""

from __future__ import annotations

from cipher.registry.models import HandlerCategory, HandlerSeed

_CORE = HandlerCategory.CORE
_MUSIC = HandlerCategory.MUSIC
_ROUTES = HandlerCategory.ROUTES

DEFAULT_HANDLER_SEEDS: tuple[HandlerSeed, ...] = (
    # Core handlers, including the three anchors
    HandlerSeed(
        name="analyze_current_file",
        category=_CORE,
        capabilities=("file-analysis", "syntax-checking", "quality-assessment"),
        strengths=("typescript analysis", "component analysis", "error detection"),
        limitations=("cannot fix issues", "read-only analysis"),
        success_rate=0.9,
        average_execution_time_ms=2000,
    ),
    HandlerSeed(
        name="smart_file_rebuilder",
        category=_CORE,
        capabilities=(
            "structural-refactoring",
            "complex-fixes",
            "component-creation",
            "hook-restructuring",
        ),
        strengths=("hook fixes", "svg modules", "complex rebuilds", "architectural changes"),
        limitations=("slower execution", "requires valid input"),
        success_rate=0.85,
        average_execution_time_ms=5000,
    ),
    HandlerSeed(
        name="auto_fix_current_file",
        category=_CORE,
        capabilities=("simple-fixes", "syntax-fixes", "auto-repair", "pattern-matching"),
        strengths=("syntax repair", "import cleanup", "formatting"),
        limitations=("surface-level fixes only",),
        success_rate=0.8,
        average_execution_time_ms=1500,
    ),
    HandlerSeed(
        name="quick_file_fix",
        category=_CORE,
        capabilities=("simple-fixes", "quick-repairs", "pattern-matching"),
        strengths=("simple fixes", "fast turnaround"),
        limitations=("single file only",),
        success_rate=0.75,
        average_execution_time_ms=800,
    ),
    # Intelligence
    HandlerSeed(
        name="train_brain",
        category=HandlerCategory.INTELLIGENCE,
        capabilities=("pattern-learning", "codebase-scan"),
        strengths=("workspace learning",),
        limitations=("slow on large workspaces",),
        success_rate=0.8,
        average_execution_time_ms=8000,
    ),
    HandlerSeed(
        name="self_repair",
        category=HandlerCategory.INTELLIGENCE,
        capabilities=("auto-repair", "import-repair", "dependency-check"),
        strengths=("import repair", "broken references"),
        limitations=("requires project context",),
        success_rate=0.7,
        average_execution_time_ms=4000,
    ),
    HandlerSeed(
        name="cipher_watchdog",
        category=HandlerCategory.INTELLIGENCE,
        capabilities=("file-monitoring", "health-audit"),
        strengths=("continuous monitoring",),
        limitations=("background only",),
        success_rate=0.75,
        average_execution_time_ms=1000,
    ),
    HandlerSeed(
        name="get_personalized_suggestions",
        category=HandlerCategory.INTELLIGENCE,
        capabilities=("suggestions", "pattern-matching"),
        strengths=("learned suggestions",),
        limitations=("needs learning history",),
        success_rate=0.7,
        average_execution_time_ms=1200,
    ),
    HandlerSeed(
        name="generate_team_report",
        category=HandlerCategory.INTELLIGENCE,
        capabilities=("reporting", "quality-assessment"),
        strengths=("team metrics",),
        limitations=("read-only analysis",),
        success_rate=0.85,
        average_execution_time_ms=3000,
    ),
    # Music
    HandlerSeed(
        name="analyze_guitar_components",
        category=_MUSIC,
        capabilities=("guitar-analysis", "chord-detection", "music-components"),
        strengths=("guitar expertise", "music theory", "component analysis"),
        limitations=("music files only", "specialized domain"),
        success_rate=0.9,
        average_execution_time_ms=3000,
    ),
    HandlerSeed(
        name="generate_guitar_component",
        category=_MUSIC,
        capabilities=("guitar-component-creation", "music-generation", "code-generation"),
        strengths=("custom guitar components", "music-specific logic"),
        limitations=("guitar domain only", "requires music context"),
        success_rate=0.85,
        average_execution_time_ms=4000,
    ),
    HandlerSeed(
        name="analyze_music_theory",
        category=_MUSIC,
        capabilities=("music-theory", "chord-detection", "music-components"),
        strengths=("music theory", "scale analysis"),
        limitations=("music files only",),
        success_rate=0.85,
        average_execution_time_ms=2500,
    ),
    HandlerSeed(
        name="analyze_vocal_components",
        category=_MUSIC,
        capabilities=("vocal-analysis", "music-components"),
        strengths=("vocal range detection",),
        limitations=("vocal components only",),
        success_rate=0.8,
        average_execution_time_ms=2500,
    ),
    HandlerSeed(
        name="generate_vocal_component",
        category=_MUSIC,
        capabilities=("audio-creation", "music-generation", "code-generation"),
        strengths=("vocal components",),
        limitations=("requires music context",),
        success_rate=0.75,
        average_execution_time_ms=4500,
    ),
    HandlerSeed(
        name="create_chord_progression",
        category=_MUSIC,
        capabilities=("music-generation", "chord-detection"),
        strengths=("chord progressions",),
        limitations=("music domain only",),
        success_rate=0.8,
        average_execution_time_ms=2000,
    ),
    HandlerSeed(
        name="generate_stem_and_tab",
        category=_MUSIC,
        capabilities=("audio-creation", "tablature"),
        strengths=("tablature export",),
        limitations=("audio input required",),
        success_rate=0.75,
        average_execution_time_ms=6000,
    ),
    HandlerSeed(
        name="optimize_guitar_code",
        category=_MUSIC,
        capabilities=("guitar-analysis", "optimization"),
        strengths=("guitar performance",),
        limitations=("guitar domain only",),
        success_rate=0.8,
        average_execution_time_ms=3500,
    ),
    # Routes
    HandlerSeed(
        name="audit_route_health",
        category=_ROUTES,
        capabilities=("route-analysis", "health-audit"),
        strengths=("route health", "dead link detection"),
        limitations=("read-only analysis",),
        success_rate=0.85,
        average_execution_time_ms=2500,
    ),
    HandlerSeed(
        name="visualize_routes",
        category=_ROUTES,
        capabilities=("route-visualization", "route-analysis"),
        strengths=("route maps",),
        limitations=("read-only analysis",),
        success_rate=0.8,
        average_execution_time_ms=3000,
    ),
    HandlerSeed(
        name="fix_routes",
        category=_ROUTES,
        capabilities=("route-analysis", "navigation-repair"),
        strengths=("navigation repair",),
        limitations=("router files only",),
        success_rate=0.75,
        average_execution_time_ms=3500,
    ),
    # Utilities
    HandlerSeed(
        name="optimize_performance",
        category=HandlerCategory.UTILITIES,
        capabilities=("performance-analysis", "optimization"),
        strengths=("memoization", "render optimization"),
        limitations=("react components only",),
        success_rate=0.75,
        average_execution_time_ms=3500,
    ),
    HandlerSeed(
        name="generate_tests",
        category=HandlerCategory.UTILITIES,
        capabilities=("test-generation", "code-generation"),
        strengths=("test scaffolding",),
        limitations=("unit tests only",),
        success_rate=0.7,
        average_execution_time_ms=4000,
    ),
    HandlerSeed(
        name="detect_duplicate_files",
        category=HandlerCategory.UTILITIES,
        capabilities=("duplicate-detection", "file-analysis"),
        strengths=("duplicate detection",),
        limitations=("read-only analysis",),
        success_rate=0.85,
        average_execution_time_ms=2000,
    ),
    # Deployment and import/export
    HandlerSeed(
        name="deploy_beta",
        category=HandlerCategory.DEPLOYMENT,
        capabilities=("deployment", "build-verification"),
        strengths=("beta deployment",),
        limitations=("requires build tooling",),
        success_rate=0.7,
        average_execution_time_ms=10000,
    ),
    HandlerSeed(
        name="import_gpt",
        category=HandlerCategory.IMPORT_EXPORT,
        capabilities=("code-import",),
        strengths=("code import",),
        limitations=("text input only",),
        success_rate=0.7,
        average_execution_time_ms=1500,
    ),
    HandlerSeed(
        name="zip_file",
        category=HandlerCategory.IMPORT_EXPORT,
        capabilities=("archive-export",),
        strengths=("archive export",),
        limitations=("no content changes",),
        success_rate=0.95,
        average_execution_time_ms=1000,
    ),
)
