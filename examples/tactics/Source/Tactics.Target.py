from buildrules.rules_markers import *


class TacticsTarget(TargetRules):
    type = TargetType.Game
    default_build_settings = BuildSettingsVersion.V6
    include_order_version = EngineIncludeOrderVersion.Unreal5_7
    extra_module_names = ["Tactics"]
