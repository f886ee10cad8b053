"""Engine configuration: player options and UI layout settings."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ConfigurationOption:
    """One player option: a slider, a toggle or a select."""

    name: str = ""
    scope: str = ""
    advanced: bool = False
    standard: bool = False
    type: str = "slider"
    default: float = 0
    minimum: float = 0
    maximum: float = 0
    step: float = 1
    values: list[str] = field(default_factory=list)
    unit: str = ""

    def to_json(self) -> dict:
        common = {
            "name": self.name,
            "advanced": self.advanced,
            "standard": self.standard,
            "scope": self.scope,
            "type": self.type,
        }
        if self.type == "select":
            return {**common, "def": self.default, "values": list(self.values)}
        if self.type == "slider":
            return {
                **common,
                "def": self.default,
                "min": self.minimum,
                "max": self.maximum,
                "step": self.step,
                "unit": self.unit,
            }
        if self.type == "toggle":
            return {**common, "def": 1 if self.default else 0}
        raise ValueError("Invalid option type.")


@dataclass
class Visibility:
    """Scale and opacity of a UI element."""

    scale: float = 0
    alpha: float = 0

    def to_json(self) -> dict:
        return {"scale": self.scale, "alpha": self.alpha}


@dataclass
class AnimationTween:
    """A single tween from one value to another."""

    from_: float = 0
    to: float = 0
    duration: float = 0
    ease: str = ""

    def to_json(self) -> dict:
        return {"from": self.from_, "to": self.to, "duration": self.duration, "ease": self.ease}


@dataclass
class Animation:
    """Scale and opacity tweens of an animated UI element."""

    scale: AnimationTween = field(default_factory=AnimationTween)
    alpha: AnimationTween = field(default_factory=AnimationTween)

    def to_json(self) -> dict:
        return {"scale": self.scale.to_json(), "alpha": self.alpha.to_json()}


@dataclass
class ConfigurationUI:
    """UI metrics, visibilities and animations."""

    primary_metric: str = ""
    secondary_metric: str = ""
    menu_visibility: Visibility = field(default_factory=Visibility)
    judgment_visibility: Visibility = field(default_factory=Visibility)
    combo_visibility: Visibility = field(default_factory=Visibility)
    primary_metric_visibility: Visibility = field(default_factory=Visibility)
    secondary_metric_visibility: Visibility = field(default_factory=Visibility)
    progress_visibility: Visibility = field(default_factory=Visibility)
    tutorial_navigation_visibility: Visibility = field(default_factory=Visibility)
    tutorial_instruction_visibility: Visibility = field(default_factory=Visibility)
    judgment_animation: Animation = field(default_factory=Animation)
    combo_animation: Animation = field(default_factory=Animation)
    judgment_error_style: str = ""
    judgment_error_placement: str = ""
    judgment_error_min: int = 0
    scope: str = ""

    def to_json(self) -> dict:
        return {
            "scope": self.scope,
            "primaryMetric": self.primary_metric,
            "secondaryMetric": self.secondary_metric,
            "menuVisibility": self.menu_visibility.to_json(),
            "judgmentVisibility": self.judgment_visibility.to_json(),
            "comboVisibility": self.combo_visibility.to_json(),
            "primaryMetricVisibility": self.primary_metric_visibility.to_json(),
            "secondaryMetricVisibility": self.secondary_metric_visibility.to_json(),
            "progressVisibility": self.progress_visibility.to_json(),
            "tutorialNavigationVisibility": self.tutorial_navigation_visibility.to_json(),
            "tutorialInstructionVisibility": self.tutorial_instruction_visibility.to_json(),
            "judgmentAnimation": self.judgment_animation.to_json(),
            "comboAnimation": self.combo_animation.to_json(),
            "judgmentErrorStyle": self.judgment_error_style,
            "judgmentErrorPlacement": self.judgment_error_placement,
            "judgmentErrorMin": self.judgment_error_min,
        }


@dataclass
class EngineConfiguration:
    """Options and UI settings of an engine."""

    options: list[ConfigurationOption] = field(default_factory=list)
    ui: ConfigurationUI = field(default_factory=ConfigurationUI)

    def to_json(self) -> dict:
        return {"options": [option.to_json() for option in self.options], "ui": self.ui.to_json()}