"""
Bundled Yojana Table
Used when no remote scheme listing is configured.
Records keep the portal's field names and go through the same normalizer
as remote data.
"""

BUNDLED_YOJANAS = [
    {
        "YojanaId": 1,
        "YojanaName": "ADIP Scheme (Assistance to Disabled Persons for Aids/Appliances)",
        "YojanaDescription": "Aids and assistive devices for persons with disabilities",
        "Start_Age": 0,
        "UpTo_Age": 60,
        "DisabilityType": "physical, hearing, vision",
        "tblYojanaDivyangTypePercentages": [{"DivyangType": "physical", "Percentage": 40}],
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 2,
        "YojanaName": "National Fellowship for Persons with Disabilities",
        "YojanaDescription": "Fellowship for higher studies (M.Phil/Ph.D)",
        "Start_Age": 18,
        "UpTo_Age": 35,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": [{"DivyangType": "all", "Percentage": 40}],
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 3,
        "YojanaName": "Scholarship for Students with Disabilities",
        "YojanaDescription": "Pre-matric, post-matric and top class scholarships",
        "Start_Age": 5,
        "UpTo_Age": 30,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": 40,
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 4,
        "YojanaName": "Deendayal Disabled Rehabilitation Scheme (DDRS)",
        "YojanaDescription": "Grants to NGOs running rehabilitation projects",
        "Start_Age": 0,
        "UpTo_Age": 80,
        "DisabilityType": "all",
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 5,
        "YojanaName": "Skill Development for Persons with Disabilities (SIPDA)",
        "YojanaDescription": "Vocational and skill training",
        "Start_Age": 18,
        "UpTo_Age": 45,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": 40,
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 6,
        "YojanaName": "Niramaya Health Insurance Scheme",
        "YojanaDescription": "Health insurance cover up to Rs. 1 lakh",
        "Start_Age": 0,
        "UpTo_Age": 65,
        "DisabilityType": "intellectual, autism, cerebral palsy, multiple",
        "PublishedBy": "National Trust",
    },
    {
        "YojanaId": 7,
        "YojanaName": "Accessible India Campaign (Sugamya Bharat Abhiyan)",
        "YojanaDescription": "Accessible buildings, transport and ICT",
        "Start_Age": 0,
        "UpTo_Age": 99,
        "DisabilityType": "all",
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 8,
        "YojanaName": "Indira Gandhi Disability Pension Scheme",
        "YojanaDescription": "Monthly pension for BPL persons with severe disability",
        "Start_Age": 18,
        "UpTo_Age": 79,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": [{"DivyangType": "all", "Percentage": 80}],
        "PublishedBy": "Central Government",
    },
    {
        "YojanaId": 9,
        "YojanaName": "State Disability Pension Scheme",
        "YojanaDescription": "Monthly pension from the state government",
        "Start_Age": 18,
        "UpTo_Age": 79,
        "DisabilityType": "all",
        "tblYojanaDivyangTypePercentages": 40,
        "PublishedBy": "State Government",
    },
    {
        "YojanaId": 10,
        "YojanaName": "Special Employment Exchange for Persons with Disabilities",
        "YojanaDescription": "Job placement assistance",
        "Start_Age": 18,
        "UpTo_Age": 55,
        "DisabilityType": "all",
        "PublishedBy": "State Government",
    },
]
