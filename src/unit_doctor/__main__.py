from unit_doctor.cli import main

main()
