"""
===============================================================================
MISSION DESIGN - Navigation Package
===============================================================================
Ground-segment geometry and contact prediction.

Modules:
    ground_stations  -- Default ground-station network
    pass_prediction  -- Look angles, pass scan and contact metrics
===============================================================================
"""
