from buildrules.rules_markers import *


class Tactics(ModuleRules):
    pch_usage = PCHUsageMode.UseExplicitOrSharedPCHs

    public_dependency_module_names = [
        "Core",
        "CoreUObject",
        "Engine",
        "InputCore",
        "EnhancedInput",
        "AIModule",
        "NavigationSystem",
        "StateTreeModule",
        "GameplayStateTreeModule",
        "Niagara",
        "UMG",
        "Slate",
    ]

    private_dependency_module_names = []

    public_include_paths = [
        "Tactics",
        "Tactics/Core",
        "Tactics/Characters/Player",
        "Tactics/Characters/Enemy",
        "Tactics/Components",
        "Tactics/Managers",
        "Tactics/UI",
        "Tactics/AI",
        "Tactics/Utils",
        "Tactics/GameModes/Strategy",
        "Tactics/GameModes/Strategy/UI",
        "Tactics/GameModes/TwinStick",
        "Tactics/GameModes/TwinStick/AI",
        "Tactics/GameModes/TwinStick/Gameplay",
        "Tactics/GameModes/TwinStick/UI",
    ]

    # Uncomment if you are using Slate UI
    # private_dependency_module_names += ["SlateCore"]

    # Uncomment if you are using online features
    # private_dependency_module_names += ["OnlineSubsystem"]
